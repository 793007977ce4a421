"""Services for locating and rewriting source text."""
