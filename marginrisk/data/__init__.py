"""Result caching"""

from .cache import ResultCache, make_key

__all__ = ["ResultCache", "make_key"]
