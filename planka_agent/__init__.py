"""Planka agent: turn task proposals and free text into Planka cards."""

__version__ = "0.1.0"
