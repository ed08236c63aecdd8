"""Chirpy micro-posting service."""
