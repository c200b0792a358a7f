"""Core migration components."""
