"""Database package: declarative base, engine and models."""
