"""Mood search — free text → structured filter → station query, with one loosening step."""

import logging
from typing import Any

from radioglobe.catalog import filter_results, safe_search
from radioglobe.inference import sanitize_user_text
from radioglobe.models import MoodFilter, MoodResult, StationQuery, StationRecord

logger = logging.getLogger(__name__)

FALLBACK_MOOD = MoodFilter(
    explanation="Couldn't quite catch that vibe. Try 'Jazz from France'.",
    tag="pop",
)

INSIGHT_FALLBACK = "Tuning into global frequencies..."
INSIGHT_EMPTY = "Enjoy the tunes!"


async def interpret_mood(free_text: str, inference: Any) -> MoodFilter:
    """Ask the inference service for a filter. Any failure yields FALLBACK_MOOD."""
    safe_text = sanitize_user_text(free_text)
    if safe_text is None:
        logger.info("Mood text rejected by sanitizer; using fallback filter")
        return FALLBACK_MOOD
    try:
        return await inference.extract_mood(safe_text)
    except Exception as e:
        logger.warning("Mood extraction failed, using fallback filter: %s", e)
        return FALLBACK_MOOD


async def resolve_mood(
    free_text: str, inference: Any, source: Any, limit: int = 50
) -> MoodResult:
    """Turn a mood description into a geo-valid station list.

    The primary query uses every field the model returned. When it finds
    nothing and a tag is known, a single tag-only query replaces it; there
    is no further loosening. An empty result is a normal outcome.

    Args:
        free_text: What the listener typed ("Rainy jazz cafe in Tokyo").
        inference: Object with ``async extract_mood(text) -> MoodFilter``.
        source: Object with ``async search(StationQuery) -> list[StationRecord]``.
        limit: Max records per query.

    Returns:
        MoodResult with the explanation to show and the stations to place.
    """
    mood = await interpret_mood(free_text, inference)

    primary = StationQuery(country=mood.country, tag=mood.tag, limit=limit)
    stations: tuple[StationRecord, ...] = filter_results(
        await safe_search(source, primary)
    )
    loosened = False

    if not stations and mood.tag:
        logger.info("No stations for %s; retrying with tag=%s only", primary, mood.tag)
        loose = StationQuery(tag=mood.tag, limit=limit)
        stations = filter_results(await safe_search(source, loose))
        loosened = True

    return MoodResult(
        explanation=mood.explanation, stations=stations, mood=mood, loosened=loosened
    )


async def station_insight(station: StationRecord, inference: Any) -> str:
    """One punchy sentence about the station's music scene, or a stock line."""
    prompt = (
        "You are a cool, knowledgeable radio DJ.\n"
        f'The user just tuned into "{station.name}" in {station.country or "an unknown country"}.\n'
        f"Tags: {station.tags or 'none'}.\n\n"
        "Give a very short (1 sentence, max 20 words) fun fact or interesting comment "
        "about this location's music scene or culture.\n"
        "Keep it punchy and engaging. Do not use quotes."
    )
    try:
        text = await inference.complete(prompt, max_tokens=50)
    except Exception as e:
        logger.warning("Station insight failed for %s: %s", station.uuid, e)
        return INSIGHT_FALLBACK
    return text or INSIGHT_EMPTY
