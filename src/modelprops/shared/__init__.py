"""Shared utilities: errors, structured logging and constants."""
