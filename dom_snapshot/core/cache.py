"""
Resource cache shared by the resolvers and orchestrators.

Resolved assets are keyed by normalized URL or tag-set, never by tree
identity, so a cache can be shared between captures. Entries are never
evicted; reset_all() is the only way to shrink it.
"""

from typing import Dict, Iterator, Optional


class CacheNamespace:
    """A single keyed mapping inside the resource cache."""

    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def set(self, key: str, value: str) -> None:
        self._entries[key] = value

    def has(self, key: str) -> bool:
        return key in self._entries

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"CacheNamespace({self.name!r}, entries={len(self._entries)})"


class ResourceCache:
    """
    Keyed storage for resolved assets.
    
    Namespaces:
        image: resolver input key -> data URL
        background: encoded background URL -> data URL
        base_style: sorted comma-joined tag names -> CSS text
        font: font source URL -> data URL
    
    One instance may be shared across captures on purpose. Concurrent
    captures sharing an instance are not isolated: each capture resets it
    on start.
    """

    NAMESPACES = ("image", "background", "base_style", "font")

    def __init__(self):
        self.image = CacheNamespace("image")
        self.background = CacheNamespace("background")
        self.base_style = CacheNamespace("base_style")
        self.font = CacheNamespace("font")

    def _namespace(self, namespace: str) -> CacheNamespace:
        if namespace not in self.NAMESPACES:
            raise KeyError(f"Unknown cache namespace: {namespace}")
        return getattr(self, namespace)

    def get(self, namespace: str, key: str) -> Optional[str]:
        return self._namespace(namespace).get(key)

    def set(self, namespace: str, key: str, value: str) -> None:
        self._namespace(namespace).set(key, value)

    def has(self, namespace: str, key: str) -> bool:
        return self._namespace(namespace).has(key)

    def reset_all(self) -> None:
        """Clear every namespace."""
        for namespace in self.NAMESPACES:
            self._namespace(namespace).clear()

    def stats(self) -> Dict[str, int]:
        """Get the number of entries per namespace."""
        return {name: len(self._namespace(name)) for name in self.NAMESPACES}


# Process-wide instance used by the public API unless a cache is passed in
shared_cache = ResourceCache()
