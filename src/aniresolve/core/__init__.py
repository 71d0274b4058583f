"""Core resolution logic."""
