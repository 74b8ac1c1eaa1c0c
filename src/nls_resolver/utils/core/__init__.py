"""Shared helpers: exceptions, filesystem access and logging setup."""
