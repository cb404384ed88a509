"""Data model definitions — explicit boundaries between source, catalog, and render layers."""

import math
from dataclasses import dataclass
from typing import Any


def _opt_float(value: Any) -> float | None:
    """Coerce an API coordinate to float. Missing or unparseable → None."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class StationRecord:
    """A single broadcast station as returned by the catalog source."""

    uuid: str  # Radio Browser stationuuid
    name: str
    url: str  # Stream URL as registered
    url_resolved: str  # Stream URL after playlist resolution (what we play)
    homepage: str = ""
    favicon: str = ""  # Icon URL
    tags: str = ""  # Comma-separated genre/locale tokens ("jazz,turkish,pop")
    country: str = ""
    countrycode: str = ""  # ISO 3166-1 alpha-2 ("TR", "JP")
    state: str = ""
    language: str = ""
    votes: int = 0  # Popularity score
    codec: str = ""
    bitrate: int = 0  # kbps
    geo_lat: float | None = None
    geo_long: float | None = None

    @property
    def has_geo(self) -> bool:
        """True when both coordinates are present, finite and in range."""
        lat, lon = self.geo_lat, self.geo_long
        if lat is None or lon is None:
            return False
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0

    @property
    def tag_list(self) -> tuple[str, ...]:
        return tuple(t.strip().lower() for t in self.tags.split(",") if t.strip())

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> "StationRecord":
        """Build a record from one Radio Browser JSON station object.

        Raises:
            ValueError: If the payload has no station identifier.
        """
        uuid = payload.get("stationuuid")
        if not uuid:
            raise ValueError("station payload has no stationuuid")
        return cls(
            uuid=str(uuid),
            name=(payload.get("name") or "").strip(),
            url=payload.get("url") or "",
            url_resolved=payload.get("url_resolved") or payload.get("url") or "",
            homepage=payload.get("homepage") or "",
            favicon=payload.get("favicon") or "",
            tags=payload.get("tags") or "",
            country=payload.get("country") or "",
            countrycode=payload.get("countrycode") or "",
            state=payload.get("state") or "",
            language=payload.get("language") or "",
            votes=int(payload.get("votes") or 0),
            codec=payload.get("codec") or "",
            bitrate=int(payload.get("bitrate") or 0),
            geo_lat=_opt_float(payload.get("geo_lat")),
            geo_long=_opt_float(payload.get("geo_long")),
        )


@dataclass(frozen=True)
class StationQuery:
    """Parameters of one catalog query. Defaults mirror the Radio Browser search."""

    limit: int = 20
    order: str = "clickcount"  # Popularity
    reverse: bool = True  # Descending
    hide_broken: bool = True
    has_geo_info: bool = True
    country: str | None = None
    tag: str | None = None
    name: str | None = None


@dataclass(frozen=True)
class MoodFilter:
    """Structured intent extracted from free text. Consumed immediately, never stored."""

    explanation: str
    country: str | None = None
    tag: str | None = None


@dataclass(frozen=True)
class MoodResult:
    """Outcome of a mood search, handed to the UI layer."""

    explanation: str
    stations: tuple[StationRecord, ...]
    mood: MoodFilter
    loosened: bool = False  # True when the tag-only query replaced the primary one


@dataclass(frozen=True)
class SearchResult:
    """Outcome of a plain name search."""

    stations: tuple[StationRecord, ...]
    message: str
