"""
Track catalog: the read-only table from song name to audio file path.
"""
import logging
import os
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional

logger = logging.getLogger("TrackBot.Catalog")


class TrackCatalog:
    """Immutable name -> file path lookup built once at startup.

    Relative paths are resolved against ``base_dir``. Whether the file exists
    is not checked here; FFmpeg reports a missing file when playback starts.
    """

    def __init__(self, entries: Mapping[str, str], base_dir: Optional[str] = None) -> None:
        resolved: Dict[str, str] = {}
        for name, path in entries.items():
            if base_dir and not os.path.isabs(path):
                path = os.path.join(base_dir, path)
            resolved[name] = path
        self._entries = MappingProxyType(resolved)
        # casefold index for lenient lookups; first spelling wins
        folded: Dict[str, str] = {}
        for name in resolved:
            folded.setdefault(name.casefold(), name)
        self._folded = MappingProxyType(folded)

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "TrackCatalog":
        catalog = cls(cfg.get("tracks") or {}, cfg.get("assets_dir") or None)
        logger.info("Track catalog loaded with %s track(s)", len(catalog))
        return catalog

    def lookup(self, name: str) -> Optional[str]:
        """Return the file path for ``name`` or None when unknown."""
        if not name:
            return None
        path = self._entries.get(name)
        if path is not None:
            return path
        canonical = self._folded.get(name.casefold())
        return self._entries[canonical] if canonical is not None else None

    def names(self) -> List[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
