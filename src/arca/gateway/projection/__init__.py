"""Projection of cached artifacts into the workspace tree."""
