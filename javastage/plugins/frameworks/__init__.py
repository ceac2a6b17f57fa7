"""Frameworks — optional plugins that contribute runtime configuration."""
