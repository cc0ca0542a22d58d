"""Deterministic planning scenarios and their evaluation harness."""
