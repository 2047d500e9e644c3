"""Persistence layer: SQLAlchemy engine, models and repositories."""
