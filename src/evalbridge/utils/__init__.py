"""Utility helpers for evalbridge."""
