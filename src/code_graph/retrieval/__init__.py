"""Keyword extraction, ranking and context assembly."""
