"""Read-only query selectors."""

from cashbook_kernel.selectors.base import BaseSelector

__all__ = ["BaseSelector"]
