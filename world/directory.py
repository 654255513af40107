"""
Geocoin — world/directory.py
CacheDirectory: cell key -> last persisted coin memento.
"""

from typing import Dict, Iterator, List, Optional, Tuple


class CacheDirectory:
    """
    The record of every cache whose coins have diverged from their freshly
    generated state. Outlives the live Geocache objects it describes.
    Entries are only ever dropped all at once by clear().
    """

    def __init__(self, entries: Optional[Dict[str, str]] = None):
        self._mementos: Dict[str, str] = dict(entries) if entries else {}

    def get(self, key: str) -> Optional[str]:
        return self._mementos.get(key)

    def set(self, key: str, memento: str) -> None:
        self._mementos[key] = memento

    def clear(self) -> None:
        self._mementos.clear()

    def items(self) -> List[Tuple[str, str]]:
        """Flattened (key, memento) pairs in insertion order."""
        return list(self._mementos.items())

    def __contains__(self, key: object) -> bool:
        return key in self._mementos

    def __len__(self) -> int:
        return len(self._mementos)

    def __iter__(self) -> Iterator[str]:
        return iter(self._mementos)
