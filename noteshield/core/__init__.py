"""Generic building blocks."""

from noteshield.core.cache import ExpiringCache

__all__ = ["ExpiringCache"]
