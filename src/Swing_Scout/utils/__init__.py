"""Shared utilities: the exception hierarchy."""
