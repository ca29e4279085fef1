"""Configuration models."""

from .schemas import ProviderConfig

__all__ = ["ProviderConfig"]
