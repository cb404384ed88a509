"""Simple two-language (en/tr) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "en": "RadioGlobe",
        "tr": "RadyoKüre",
    },
    "label_search": {
        "en": "Search stations",
        "tr": "İstasyon ara",
    },
    "label_mood": {
        "en": "Describe a mood",
        "tr": "Bir ruh hali anlat",
    },
    "placeholder_mood": {
        "en": "Rainy jazz cafe in Tokyo",
        "tr": "Tokyo'da yağmurlu bir caz kafe",
    },
    "btn_search": {
        "en": "Search",
        "tr": "Ara",
    },
    "btn_mood": {
        "en": "✦ Find my frequency",
        "tr": "✦ Frekansımı bul",
    },
    "btn_reset": {
        "en": "↺ Top stations",
        "tr": "↺ Popüler istasyonlar",
    },
    "welcome": {
        "en": "Welcome! Select a station to begin.",
        "tr": "Hoş geldin! Başlamak için bir istasyon seç.",
    },
    "loading_catalog": {
        "en": "Scanning global frequencies",
        "tr": "Küresel frekanslar taranıyor",
    },
    "loading_mood": {
        "en": "AI is finding your frequency...",
        "tr": "Yapay zeka frekansını arıyor...",
    },
    "tuning_in": {
        "en": "Tuning in...",
        "tr": "Ayarlanıyor...",
    },
    "search_found": {
        "en": "Found {count} stations.",
        "tr": "{count} istasyon bulundu.",
    },
    "search_none": {
        "en": "No stations found for that search.",
        "tr": "Bu arama için istasyon bulunamadı.",
    },
    "mood_empty": {
        "en": "Nothing on air for that vibe right now.",
        "tr": "Bu ruh haline uygun yayın şu an yok.",
    },
    "station_count": {
        "en": "{count} stations on the globe",
        "tr": "Kürede {count} istasyon",
    },
    "now_playing": {
        "en": "Now playing",
        "tr": "Şimdi çalıyor",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
