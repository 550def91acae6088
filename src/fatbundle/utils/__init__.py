"""fatbundle utilities."""
