"""Adapters wrapping third-party audio libraries."""
