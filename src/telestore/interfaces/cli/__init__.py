"""Command line interface for telestore."""
