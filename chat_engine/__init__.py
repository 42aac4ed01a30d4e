"""Retrieval-augmented conversation engine for the portfolio chat."""

__version__ = "0.1.0"
