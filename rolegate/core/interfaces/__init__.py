"""
Core interfaces (protocols) for extensibility.
Backends implement these protocols to be swappable.
"""

from .cache import CacheBackend

__all__ = ["CacheBackend"]
