"""Utility modules for Change Extractor."""
