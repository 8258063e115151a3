"""Reusable libraries bundled with chunklog."""
