"""Reporters — plain prompt text, JSON, and rich terminal tables."""
