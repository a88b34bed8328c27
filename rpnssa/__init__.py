"""Reverse Polish notation calculator with SSA-style variables, a small executor and an interactive loop."""

__version__ = "0.1.0"