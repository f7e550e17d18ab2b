from pluckmd.cache.memory import InMemoryCache

__all__ = [
    "InMemoryCache",
]
