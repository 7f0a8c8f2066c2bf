"""REST API for telestore."""
