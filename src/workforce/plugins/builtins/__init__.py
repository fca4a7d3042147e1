"""Built-in listeners registered on every store."""
