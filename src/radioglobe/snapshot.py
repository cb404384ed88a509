"""CLI entry point for a static globe snapshot.

Edit the ticks variable at the top, then run:
    uv run python src/radioglobe/snapshot.py
"""

import asyncio

from dotenv import load_dotenv

load_dotenv()

from radioglobe.catalog import load_initial_catalog  # noqa: E402
from radioglobe.config import Settings, configure_logging  # noqa: E402
from radioglobe.globe import GlobeFrame, GlobeScene, MarkerOverlay  # noqa: E402
from radioglobe.renderers.static import save_static_globe  # noqa: E402
from radioglobe.sources import RadioBrowserSource  # noqa: E402

ticks = 3600  # one minute of rotation at 60 fps

settings = Settings.from_env()
configure_logging(settings.log_level)

source = RadioBrowserSource(settings.radio_browser_url, settings.radio_browser_timeout)
stations = asyncio.run(load_initial_catalog(source, settings))

scene = GlobeScene()
frame = GlobeFrame()
overlay = MarkerOverlay(stations)
for _ in range(ticks):
    scene.tick(frame)

path = save_static_globe(scene, overlay, frame)
print(f"Saved: {path}")
