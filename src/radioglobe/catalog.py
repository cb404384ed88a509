"""Catalog reconciliation — merge, dedupe, geo-filter and priority-order station lists."""

import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any

from radioglobe.config import Settings
from radioglobe.i18n import t
from radioglobe.models import SearchResult, StationQuery, StationRecord
from radioglobe.sources import TransportFailure

logger = logging.getLogger(__name__)

PriorityPredicate = Callable[[StationRecord], bool]


def filter_results(
    records: Iterable[StationRecord] | None, must_have_geo: bool = True
) -> tuple[StationRecord, ...]:
    """Drop records that cannot be placed on the globe.

    Args:
        records: Records in source order. None or a non-iterable is treated
            as empty.
        must_have_geo: When False, only non-record items are dropped.

    Returns:
        The surviving records, order preserved.
    """
    if not isinstance(records, Iterable):
        return ()
    return tuple(
        r
        for r in records
        if isinstance(r, StationRecord) and (r.has_geo or not must_have_geo)
    )


def reconcile(
    result_sets: Iterable[Sequence[StationRecord] | None] | None,
    is_priority: PriorityPredicate | None = None,
) -> tuple[StationRecord, ...]:
    """Merge several query results into one canonical catalog.

    Callers pass higher-priority sources first: on a duplicate identifier the
    first copy wins, whichever source produced the later ones. Records
    without valid coordinates are dropped. If ``is_priority`` is given, the
    priority records are moved ahead of the rest without reordering either
    group (stable partition).

    Pure and idempotent; never raises on odd input.
    """
    seen: set[str] = set()
    merged: list[StationRecord] = []
    if not isinstance(result_sets, Iterable):
        return ()
    for records in result_sets:
        for record in filter_results(records):
            if record.uuid in seen:
                continue
            seen.add(record.uuid)
            merged.append(record)

    if is_priority is None:
        return tuple(merged)

    priority = [r for r in merged if is_priority(r)]
    ordinary = [r for r in merged if not is_priority(r)]
    return tuple(priority + ordinary)


def region_predicate(
    country_code: str, country: str, keywords: Iterable[str] = ()
) -> PriorityPredicate:
    """Classify stations belonging to one region.

    A station matches on its ISO code, its country name (case-insensitive),
    or any keyword appearing in its tag string.
    """
    code = country_code.upper()
    name = country.lower()
    words = tuple(k.lower() for k in keywords if k)

    def _is_region(station: StationRecord) -> bool:
        if station.countrycode.upper() == code:
            return True
        if station.country.lower() == name:
            return True
        tags = station.tags.lower()
        return any(w in tags for w in words)

    return _is_region


async def safe_search(source: Any, query: StationQuery) -> list[StationRecord]:
    """Run one query; a transport failure becomes an empty result."""
    try:
        return await source.search(query)
    except TransportFailure as e:
        logger.warning("Station query %s failed: %s", query, e)
        return []


async def load_initial_catalog(
    source: Any, settings: Settings | None = None
) -> tuple[StationRecord, ...]:
    """Fetch the opening catalog: priority region first, then the global top list.

    The three queries run concurrently. Any that fails counts as an empty
    set; the others still make it onto the globe.
    """
    settings = settings or Settings()
    queries = [
        StationQuery(country=settings.priority_country, limit=settings.country_limit),
        StationQuery(tag=settings.priority_tag, limit=settings.tag_limit),
        StationQuery(limit=settings.global_limit),
    ]
    results = await asyncio.gather(
        *(source.search(q) for q in queries), return_exceptions=True
    )

    result_sets: list[Sequence[StationRecord]] = []
    for query, result in zip(queries, results):
        if isinstance(result, BaseException):
            logger.warning("Initial query %s failed: %s", query, result)
            result_sets.append([])
        else:
            result_sets.append(result)

    catalog = reconcile(
        result_sets,
        is_priority=region_predicate(
            settings.priority_code,
            settings.priority_country,
            keywords=(settings.priority_country, settings.priority_tag),
        ),
    )
    logger.info(
        "Initial catalog: %d stations from %s raw records",
        len(catalog),
        sum(len(s) for s in result_sets),
    )
    return catalog


async def search_by_name(
    source: Any, text: str, limit: int = 50, lang: str = "en"
) -> SearchResult:
    """Plain name search. No merge needed, only the geo filter."""
    records = await safe_search(source, StationQuery(name=text, limit=limit))
    stations = filter_results(records)
    if not stations:
        return SearchResult(stations=(), message=t("search_none", lang))
    return SearchResult(
        stations=stations,
        message=t("search_found", lang).format(count=len(stations)),
    )
