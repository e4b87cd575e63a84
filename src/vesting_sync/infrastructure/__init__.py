"""Infrastructure adapters: chain node and database."""
