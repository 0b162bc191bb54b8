"""Shared utilities: time arithmetic, configuration, logging and files."""
