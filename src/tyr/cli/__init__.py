"""Command-line interface for Tyr."""
