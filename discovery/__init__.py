"""Privacy-preserving geo search and ranking for scenes and events."""
