"""Command-line interface for TrueName."""
