"""Persistence schemas for the VOID economy core."""
