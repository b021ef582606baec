"""Interpretation, resolution and creation logic for the Planka agent."""
