"""Operator Agent: a natural-language command router for a single-operator Discord bot."""

__version__ = "0.1.0"
