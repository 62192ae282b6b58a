"""Catalog backend: products, variants, taxonomy, curation and reviews."""

__version__ = "1.0.0"
