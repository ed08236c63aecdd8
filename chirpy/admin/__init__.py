"""Operational admin surface."""
