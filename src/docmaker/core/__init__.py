"""Data models, errors and section building."""
