"""Orchard Sight — agronomic insight engine for orchard plots."""

__version__ = "0.1.0"
