"""Shared UI components used across features."""
