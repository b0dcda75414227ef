"""Utility helpers for vapi-memory."""
