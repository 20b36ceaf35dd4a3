"""Project scanning and file watching."""
