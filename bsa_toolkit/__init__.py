"""BSA Toolkit - Inspect and extract Bethesda game archives."""

__version__ = "0.1.0"
