"""User-facing interfaces for telestore."""
