"""Core automation logic."""
