"""Testing utilities for code built on toolstream."""

from .fake_backend import FakeBackendSession

__all__ = ["FakeBackendSession"]
