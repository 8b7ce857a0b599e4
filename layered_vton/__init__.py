"""Sequential garment layering on top of a remote virtual try-on API."""

__version__ = "0.1.0"
