"""Core trading pipeline."""
