"""Infrastructure helpers shared by domain stores."""
