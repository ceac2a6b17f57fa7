"""Containers — packaging archetypes, one of which stages each application."""
