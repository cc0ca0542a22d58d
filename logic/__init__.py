"""Deterministic outfit engine: enrichment, scoring, generation and planning."""
