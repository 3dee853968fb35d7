"""Helpers shared by job actors."""
