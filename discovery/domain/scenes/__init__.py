"""Scene and event domain: models, policy, storage and ingestion mapping."""
