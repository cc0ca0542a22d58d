"""Persistence adapters, weather providers and observability helpers."""
