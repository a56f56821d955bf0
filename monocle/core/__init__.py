"""Refresh loop and the pieces it coordinates."""
