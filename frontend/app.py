import html
import os
import logging

import streamlit as st

from location_service import detect_location, geocode_city
from places_client import TAB_CATEGORIES, TAB_TITLES, check_backend_health, fetch_places

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))

# Page configuration
st.set_page_config(
    page_title="TripScout",
    page_icon="🧭",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for better UI
st.markdown("""
<style>
    .main-header {
        font-size: 3rem;
        text-align: center;
        padding: 1rem 0 0 0;
        font-weight: bold;
    }
    .main-header span {
        color: #22D3EE;
    }
    .place-card {
        padding: 1rem;
        border-radius: 0.75rem;
        margin: 0.5rem 0;
        background-color: rgba(255, 255, 255, 0.06);
        border: 1px solid rgba(255, 255, 255, 0.12);
    }
    .place-type {
        display: inline-block;
        margin-top: 0.5rem;
        padding: 0.1rem 0.75rem;
        border-radius: 999px;
        background-color: rgba(34, 211, 238, 0.2);
        color: #22D3EE;
        font-size: 0.8rem;
    }
    .stButton>button {
        width: 100%;
        border-radius: 0.5rem;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)

# Backend API configuration
BACKEND_URL = os.getenv("BACKEND_URL", "http://localhost:5000")

# Initialize session state
if "page" not in st.session_state:
    st.session_state.page = "home"

if "location" not in st.session_state:
    st.session_state.location = {"name": "", "coords": None}

if "location_error" not in st.session_state:
    st.session_state.location_error = None

if "selected_category" not in st.session_state:
    st.session_state.selected_category = "all"


def browser_coords_from_query():
    """Coordinates handed over by the browser as ?lat=..&lng=.. query parameters."""
    params = st.query_params
    try:
        return float(params["lat"]), float(params["lng"])
    except (KeyError, ValueError):
        return None


def run_location_detection():
    with st.spinner("Detecting your location..."):
        detected = detect_location(browser_coords_from_query())
    if detected:
        st.session_state.location = {
            "name": detected.name,
            "coords": {"lat": detected.lat, "lng": detected.lng},
        }
        st.session_state.location_error = None
    else:
        st.session_state.location = {"name": "", "coords": None}
        st.session_state.location_error = "Location detection failed. Please enter your location manually."
    st.session_state.detection_done = True


def render_place(item: dict):
    st.markdown(f"""
    <div class="place-card">
        <h4 style="margin: 0;">{html.escape(item['name'])}</h4>
        <div style="color: #9CA3AF; margin-top: 0.25rem;">{html.escape(item['location'])}</div>
        <span class="place-type">{html.escape(item['type'].upper())}</span>
    </div>
    """, unsafe_allow_html=True)


def render_home():
    st.markdown('<div class="main-header">Trip<span>Scout</span></div>', unsafe_allow_html=True)
    st.markdown("<p style='text-align: center; color: #9CA3AF;'>Discover places around you</p>", unsafe_allow_html=True)

    if not st.session_state.get("detection_done"):
        run_location_detection()

    st.subheader("What is your location?")
    with st.form("location_form"):
        name = st.text_input(
            "Location",
            value=st.session_state.location["name"],
            placeholder="Enter your location",
            label_visibility="collapsed"
        )
        submitted = st.form_submit_button("Select Location")

    if submitted:
        name = name.strip()
        if not name:
            st.warning("Please enter a location.")
        elif name == st.session_state.location["name"] and st.session_state.location["coords"]:
            st.session_state.page = "results"
            st.rerun()
        else:
            detected = geocode_city(name)
            if detected:
                st.session_state.location = {
                    "name": name,
                    "coords": {"lat": detected.lat, "lng": detected.lng},
                }
                st.session_state.page = "results"
                st.rerun()
            else:
                st.error(f'Could not find coordinates for "{name}". Please try a different location.')

    if st.session_state.location_error:
        st.error(st.session_state.location_error)
        if st.button("Try again"):
            st.session_state.detection_done = False
            st.rerun()
    else:
        st.caption("We use GPS and IP address to find your approximate location")


def render_results():
    header_left, header_right = st.columns([1, 5])
    with header_left:
        if st.button("⬅️ Back"):
            st.session_state.page = "home"
            st.rerun()
    with header_right:
        st.markdown('<div class="main-header" style="text-align: left; font-size: 2rem; padding: 0;">Trip<span>Scout</span></div>', unsafe_allow_html=True)

    tab = st.radio(
        "View",
        options=list(TAB_TITLES),
        format_func=TAB_TITLES.get,
        horizontal=True,
        key="active_tab",
        on_change=lambda: st.session_state.update(selected_category="all")
    )

    location = st.session_state.location
    st.subheader(f"{TAB_TITLES[tab]} in {location['name'] or 'your area'}")

    categories = TAB_CATEGORIES[tab]
    chip_columns = st.columns(len(categories))
    for column, category in zip(chip_columns, categories):
        label = "All" if category == "all" else f"{category.capitalize()}s"
        if column.button(label, key=f"chip_{tab}_{category}",
                         type="primary" if st.session_state.selected_category == category else "secondary"):
            st.session_state.selected_category = category
            st.rerun()

    selected = st.session_state.selected_category
    with st.spinner("Loading places..."):
        items = fetch_places(
            BACKEND_URL,
            tab,
            selected,
            coords=location["coords"],
            location=location["name"]
        )

    if not items:
        noun = "results" if selected == "all" else f"{selected}s"
        st.info(f"No {noun} found in this area.")
        if st.button("Try a different location"):
            st.session_state.page = "home"
            st.rerun()
        return

    for item in items:
        render_place(item)


# Sidebar
with st.sidebar:
    st.header("⚙️ Status")
    if check_backend_health(BACKEND_URL):
        st.success("✅ Backend Connected")
    else:
        st.warning("⚠️ Backend Disconnected")
        st.caption("Run: `python run.py` in the backend folder")

    st.divider()
    st.write(f"**Location:** {st.session_state.location['name'] or 'not set'}")
    if st.session_state.location["coords"]:
        coords = st.session_state.location["coords"]
        st.write(f"**Coordinates:** {coords['lat']:.4f}, {coords['lng']:.4f}")

# Main view
if st.session_state.page == "results":
    render_results()
else:
    render_home()

# Footer
st.divider()
st.markdown("""
<div style='text-align: center; color: #999; padding: 1rem;'>
    <small>Powered by FastAPI, Geoapify & OpenStreetMap | Made with ❤️ using Streamlit</small>
</div>
""", unsafe_allow_html=True)
