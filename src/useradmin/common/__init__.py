"""Shared building blocks used across feature modules."""
