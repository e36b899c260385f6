"""CLI module for tuca."""
