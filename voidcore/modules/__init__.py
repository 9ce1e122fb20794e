"""Async services orchestrating the domain models."""
