"""Waybler REST endpoint helpers."""
