"""Graph storage and per-file indexing."""
