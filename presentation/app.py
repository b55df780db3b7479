# presentation/app.py
import asyncio
import sys
from pathlib import Path

import streamlit as st
from streamlit_folium import st_folium

# Ensure repository root is on the Python path so imports work with Streamlit
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.append(str(REPO_ROOT))

from core.config import Settings, configure_logging  # noqa: E402
from domain.models import LocationStatus  # noqa: E402
from presentation.common import (  # noqa: E402
    FoliumMapView,
    build_screen,
    has_moved,
    marker_rows,
    needs_consent,
    settled_event,
    with_consent,
)

st.set_page_config(
    page_title="Nearby Markers",
    page_icon="📍",
    layout="wide",
)
st.title("📍 Map with markers")

# ───────────────────────── one screen per session ─────────────────────────
if "screen" not in st.session_state:
    settings = Settings.from_env()
    configure_logging(settings.log_level)

    if needs_consent(settings):
        consent = st.session_state.get("location_consent")
        if consent is None:
            st.info(
                "Your approximate location is looked up from your IP address "
                "by a third-party service."
            )
            allow, decline = st.columns(2)
            if allow.button("Share approximate location"):
                st.session_state["location_consent"] = True
                st.rerun()
            if decline.button("Not now"):
                st.session_state["location_consent"] = False
                st.rerun()
            st.stop()
        settings = with_consent(settings, consent)

    view = FoliumMapView(tiles=settings.tiles)
    screen = build_screen(settings, view)
    with st.spinner("Locating…"):
        asyncio.run(screen.start())

    st.session_state["screen"] = screen
    st.session_state["view"] = view

screen = st.session_state["screen"]
view = st.session_state["view"]

state = screen.location.value
if state.status is not LocationStatus.RESOLVED:
    st.warning(screen.status_message())
    st.stop()

message = screen.status_message()
if message:
    st.error(message)

# ───────────────────────── map / settled movement ─────────────────────────
output = st_folium(
    view.build_map(),
    width="100%",
    height=600,
    returned_objects=["center", "zoom"],
    key="markers_map",
)

event = settled_event(output)
if event is not None and has_moved(view.last_settled, event.center):
    view.follow(event)
    asyncio.run(screen.handle_map_event(event))
    st.rerun()

# ───────────────────────── table view ─────────────────────────
if screen.markers:
    st.subheader(f"{len(screen.markers)} markers")
    st.dataframe(marker_rows(screen.markers, state.coordinate), width="stretch")
else:
    st.info("No markers around the current map center.")
