"""Core conversion logic."""
