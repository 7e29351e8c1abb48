"""Blockchain data sources."""
