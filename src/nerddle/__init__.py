"""Nerddle: text blogging with aura, sessions and a hash router."""

__version__ = "0.1.0"
