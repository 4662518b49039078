"""Command-line interface for daostore."""
