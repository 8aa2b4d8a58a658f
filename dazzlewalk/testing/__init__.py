"""Testing utilities for DazzleWalk consumers."""

from .fixtures import InMemoryListing, InMemoryProbe

__all__ = ['InMemoryListing', 'InMemoryProbe']
