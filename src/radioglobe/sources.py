"""Radio Browser catalog client — the only place that talks to the station API."""

import logging

import httpx

from radioglobe.models import StationQuery, StationRecord

logger = logging.getLogger(__name__)

_USER_AGENT = "RadioGlobe/1.0 (+https://www.radio-browser.info)"


class TransportFailure(Exception):
    """Station API unreachable, non-success status, or undecodable body."""


def query_params(query: StationQuery) -> dict[str, str | int]:
    """Translate a StationQuery into /json/stations/search parameters.

    Absent filters are omitted entirely; an empty ``country=`` would
    otherwise match nothing.
    """
    params: dict[str, str | int] = {
        "limit": query.limit,
        "order": query.order,
        "reverse": "true" if query.reverse else "false",
        "hidebroken": "true" if query.hide_broken else "false",
    }
    if query.has_geo_info:
        params["has_geo_info"] = "true"
    if query.country:
        params["country"] = query.country
    if query.tag:
        params["tag"] = query.tag
    if query.name:
        params["name"] = query.name
    return params


class RadioBrowserSource:
    """Async station search over the public Radio Browser JSON API.

    A client may be injected (tests pass one built on ``httpx.MockTransport``).
    Without one, each search opens a short-lived client so the source is safe
    to use from successive ``asyncio.run`` calls.
    """

    def __init__(
        self,
        base_url: str = "https://de1.api.radio-browser.info",
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client

    async def _get(self, url: str, params: dict[str, str | int]) -> httpx.Response:
        if self._client is not None:
            return await self._client.get(url, params=params)
        async with httpx.AsyncClient(
            timeout=self.timeout, headers={"User-Agent": _USER_AGENT}
        ) as client:
            return await client.get(url, params=params)

    async def search(self, query: StationQuery) -> list[StationRecord]:
        """Run one search query.

        Args:
            query: Filters and ordering.

        Returns:
            Records in the order the API returned them. Entries that cannot be
            decoded are skipped.

        Raises:
            TransportFailure: On connection errors, non-2xx status or a body
                that is not a JSON list.
        """
        url = f"{self.base_url}/json/stations/search"
        try:
            resp = await self._get(url, query_params(query))
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPError as e:
            raise TransportFailure(f"station search failed: {e}") from e
        except ValueError as e:
            raise TransportFailure(f"station search returned invalid JSON: {e}") from e

        if not isinstance(payload, list):
            raise TransportFailure(
                f"station search returned {type(payload).__name__}, expected list"
            )

        records: list[StationRecord] = []
        for item in payload:
            try:
                records.append(StationRecord.from_api(item))
            except (AttributeError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed station entry: %s", e)
        logger.debug("search %s -> %d stations", query, len(records))
        return records

    async def top(self, limit: int = 50) -> list[StationRecord]:
        """Most-clicked working stations with coordinates."""
        return await self.search(StationQuery(limit=limit))
