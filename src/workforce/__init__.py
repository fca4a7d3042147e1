"""workforce — aggregate-based HR domain model with a SQLite-backed service layer."""

__version__ = "0.1.0"
