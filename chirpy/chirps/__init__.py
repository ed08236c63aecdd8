"""Chirp posting."""
