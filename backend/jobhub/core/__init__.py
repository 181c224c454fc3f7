"""Configuration, database lifecycle and the error taxonomy."""
