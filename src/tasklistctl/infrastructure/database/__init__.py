"""SQLite database layer (SQLAlchemy Core)."""
