"""Deterministic credit-risk scoring and loan lifecycle service."""

__version__ = "0.1.0"
