"""Conformance Runner — fetch, cache and drive the connectconformance harness."""

__version__ = "0.1.0"
