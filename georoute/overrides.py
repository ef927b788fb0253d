"""Configurable coordinate overrides for addresses with unreliable geocoder results."""
from __future__ import annotations

from typing import Mapping, Optional

from georoute.domain import Coordinates


class CoordinateOverrides:
    """Case-insensitive substring table mapping address fragments to fixed coordinates.

    The first key (in insertion order) found inside the address wins.
    """

    def __init__(self, mapping: Mapping[str, tuple[float, float] | Coordinates] | None = None) -> None:
        self._entries: list[tuple[str, Coordinates]] = []
        for fragment, coords in (mapping or {}).items():
            if not fragment:
                continue
            if not isinstance(coords, Coordinates):
                lat, lng = coords
                coords = Coordinates(lat=float(lat), lng=float(lng))
            self._entries.append((fragment.lower(), coords))

    def match(self, address: str) -> Optional[Coordinates]:
        """Return the override for `address`, or None."""
        lowered = (address or "").lower()
        for fragment, coords in self._entries:
            if fragment in lowered:
                return coords
        return None

    def __len__(self) -> int:
        return len(self._entries)
