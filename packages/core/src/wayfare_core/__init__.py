"""Shared schemas for the Wayfare search cache."""
