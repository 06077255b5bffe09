"""Core utilities shared across designspec."""
