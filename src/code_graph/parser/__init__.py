"""Language parsers producing declaration records."""
