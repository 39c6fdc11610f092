"""Wayfare search cache and price refresh service."""
