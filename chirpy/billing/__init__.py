"""Billing provider integration."""
