"""Shared helpers: logging setup and structured command logging."""
