"""Utility helpers for artifact handling."""
