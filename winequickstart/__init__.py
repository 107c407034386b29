"""Wine Quickstart content operations."""
