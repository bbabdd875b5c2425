"""Database-backed repositories."""
