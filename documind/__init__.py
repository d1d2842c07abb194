"""Document analysis service: upload, store, extract, classify."""

__version__ = "1.0.0"
