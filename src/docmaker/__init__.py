"""docmaker: estate-planning document generation and storage."""

__version__ = "0.1.0"
