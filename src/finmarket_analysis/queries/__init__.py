"""Read-only aggregate, ranking and correlation queries over the cleaned dataset."""
