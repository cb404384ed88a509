"""RadioGlobe — Streamlit app for tuning into stations on a rotating globe."""

import asyncio
import html

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from radioglobe.catalog import load_initial_catalog, search_by_name  # noqa: E402
from radioglobe.config import Settings, configure_logging  # noqa: E402
from radioglobe.globe import GlobeFrame, GlobeScene, MarkerOverlay  # noqa: E402
from radioglobe.i18n import t  # noqa: E402
from radioglobe.inference import ClaudeInference  # noqa: E402
from radioglobe.models import StationRecord  # noqa: E402
from radioglobe.mood import resolve_mood, station_insight  # noqa: E402
from radioglobe.renderers.plotly_3d import render_globe_figure  # noqa: E402
from radioglobe.sources import RadioBrowserSource  # noqa: E402

_settings = Settings.from_env()
configure_logging(_settings.log_level)

# --- Language detection (browser-first via streamlit-js-eval) ---
# navigator.language is read once and cached in session_state.
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in, at which point _lang is set correctly.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "tr" if _browser_lang.lower().startswith("tr") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="📻",
    layout="wide",
    initial_sidebar_state="expanded",
)


@st.cache_resource
def _source() -> RadioBrowserSource:
    return RadioBrowserSource(_settings.radio_browser_url, _settings.radio_browser_timeout)


@st.cache_resource
def _inference() -> ClaudeInference:
    return ClaudeInference(
        api_key=_settings.anthropic_api_key, model=_settings.anthropic_model
    )


# --- Session state initialization ---
# The catalog is replaced wholesale after each query; the frame and scene
# persist so the globe keeps turning from where it stopped.

if "stations" not in st.session_state:
    st.session_state.stations = None
if "current" not in st.session_state:
    st.session_state.current = None
if "insight" not in st.session_state:
    st.session_state.insight = t("welcome", _lang)
if "frame" not in st.session_state:
    st.session_state.frame = GlobeFrame()
if "scene" not in st.session_state:
    st.session_state.scene = GlobeScene()
if "overlay" not in st.session_state:
    st.session_state.overlay = MarkerOverlay()

# --- Dark theme CSS (static) ---
st.markdown(
    """
    <style>
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    html, body, [data-testid="stAppViewContainer"], [data-testid="stMain"] {
        background-color: #020205 !important;
    }
    [data-testid="stHeader"], [data-testid="stToolbar"] {
        display: none !important;
    }
    [data-testid="stSidebar"] {
        background-color: rgba(5, 10, 26, 0.95) !important;
        border-right: 1px solid rgba(0, 210, 255, 0.15) !important;
    }
    [data-testid="stMainBlockContainer"] {
        padding-top: 0 !important;
        padding-bottom: 0 !important;
    }
    [data-testid="stButton"] button {
        background-color: rgba(0, 210, 255, 0.08) !important;
        color: #7ec8e3 !important;
        border: 1px solid rgba(0, 210, 255, 0.3) !important;
        border-radius: 6px !important;
        text-align: left !important;
    }
    [data-testid="stButton"] button:hover {
        background-color: rgba(0, 210, 255, 0.2) !important;
    }
    label, [data-testid="stWidgetLabel"] p {
        color: #aaaaaa !important;
        font-size: 0.85rem !important;
    }
    .player-box {
        background: rgba(0, 0, 0, 0.65);
        border: 1px solid rgba(0, 210, 255, 0.2);
        border-radius: 12px;
        padding: 1rem 1.4rem;
        color: #e8e8e8;
    }
    .player-box .station { color: #00ffff; font-weight: 700; font-size: 1.1rem; }
    .player-box .meta { color: #999999; font-size: 0.8rem; }
    .player-box .insight { color: #e8d5a3; font-style: italic; margin-top: 0.4rem; }
    @keyframes breathe {
        0%, 100% { opacity: 0.5; }
        50%       { opacity: 1; }
    }
    .loading-line {
        color: #7ec8e3;
        animation: breathe 1.6s ease-in-out infinite;
        text-align: center;
        padding: 2rem 0;
    }
    </style>
    """,
    unsafe_allow_html=True,
)


def _set_stations(stations: tuple[StationRecord, ...]) -> None:
    st.session_state.stations = stations
    st.session_state.overlay.set_stations(stations)


def _select(station: StationRecord) -> None:
    """Station pick from the list. Re-picking the current station is a no-op."""
    current = st.session_state.current
    if current is not None and current.uuid == station.uuid:
        return
    st.session_state.current = station
    st.session_state.overlay.select(station.uuid)
    with st.spinner(t("tuning_in", _lang)):
        st.session_state.insight = asyncio.run(station_insight(station, _inference()))


# --- Initial load ---
loading_placeholder = st.empty()
if st.session_state.stations is None:
    loading_placeholder.markdown(
        f"<div class='loading-line'>{t('loading_catalog', _lang)}…</div>",
        unsafe_allow_html=True,
    )
    _set_stations(asyncio.run(load_initial_catalog(_source(), _settings)))
    loading_placeholder.empty()

# --- Sidebar: search, mood, station list ---
with st.sidebar:
    st.markdown(f"### 📻 {t('page_title', _lang)}")

    query = st.text_input(t("label_search", _lang), key="search_text")
    if st.button(t("btn_search", _lang), key="search_btn") and query.strip():
        result = asyncio.run(
            search_by_name(_source(), query.strip(), _settings.search_limit, _lang)
        )
        _set_stations(result.stations)
        st.session_state.insight = result.message

    mood_text = st.text_input(
        t("label_mood", _lang),
        placeholder=t("placeholder_mood", _lang),
        key="mood_text",
    )
    if st.button(t("btn_mood", _lang), key="mood_btn") and mood_text.strip():
        with st.spinner(t("loading_mood", _lang)):
            mood = asyncio.run(
                resolve_mood(
                    mood_text, _inference(), _source(), _settings.search_limit
                )
            )
        _set_stations(mood.stations)
        st.session_state.insight = (
            mood.explanation if mood.stations else f"{mood.explanation} {t('mood_empty', _lang)}"
        )

    if st.button(t("btn_reset", _lang), key="reset_btn"):
        _set_stations(asyncio.run(load_initial_catalog(_source(), _settings)))

    st.caption(t("station_count", _lang).format(count=len(st.session_state.stations)))

    for station in st.session_state.stations[:150]:
        marker = "● " if st.session_state.overlay.selected == station.uuid else ""
        label = f"{marker}{station.name or station.uuid} · {station.countrycode or '??'}"
        st.button(
            label,
            key=f"pick_{station.uuid}",
            on_click=_select,
            args=(station,),
            width="stretch",
        )

# --- Globe ---
fig = render_globe_figure(
    st.session_state.scene, st.session_state.overlay, st.session_state.frame
)
st.plotly_chart(fig, width="stretch", config={"displayModeBar": False})

# --- Player ---
current: StationRecord | None = st.session_state.current
if current is not None:
    st.markdown(
        "<div class='player-box'>"
        f"<div class='meta'>{t('now_playing', _lang)}</div>"
        f"<div class='station'>{html.escape(current.name)}</div>"
        f"<div class='meta'>{html.escape(current.country)} · {html.escape(current.codec)}"
        f" {current.bitrate} kbps</div>"
        f"<div class='insight'>{html.escape(st.session_state.insight)}</div>"
        "</div>",
        unsafe_allow_html=True,
    )
    st.audio(current.url_resolved, autoplay=True)
else:
    st.markdown(
        f"<div class='player-box'><div class='insight'>"
        f"{html.escape(st.session_state.insight)}</div></div>",
        unsafe_allow_html=True,
    )
