"""Plugins — containers, JRE providers and frameworks.

Public re-exports for convenient access.
"""

from javastage.plugins.base import BasePlugin, Container, Plugin, Runtime

__all__ = [
    "BasePlugin",
    "Container",
    "Plugin",
    "Runtime",
]
