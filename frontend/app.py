#file: frontend/app.py

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import asyncio
import pandas as pd
import streamlit as st

st.set_page_config(page_title="Environmental Dashboard", page_icon="🌍", layout="wide")
pd.options.display.float_format = "{:.2f}".format

from frontend.geolocation import approximate_location
from frontend.data_fetch import fetch_aqi, fetch_weather, fetch_historical_aqi, fetch_historical_weather
from frontend.utils import PERIOD_OPTIONS, history_frame, marker_label
from frontend.ui_elements import display_map, display_aqi_card, display_weather, display_charts


@st.cache_data(ttl = 3600)
def default_location() :
    return approximate_location()


async def fetch_dashboard(lat, lon, period) :
    return await asyncio.gather(
        fetch_aqi(lat, lon),
        fetch_weather(lat, lon),
        fetch_historical_aqi(lat, lon, period),
        fetch_historical_weather(lat, lon, period)
    )


st.title("Environmental Dashboard")

# Location selection
location = default_location()
with st.sidebar:
    st.header("Location")
    st.caption(f"Detected: {location['name']}")
    lat = st.number_input("Latitude", min_value = -90.0, max_value = 90.0, value = location["lat"], format = "%.4f")
    lon = st.number_input("Longitude", min_value = -180.0, max_value = 180.0, value = location["lon"], format = "%.4f")
    selected_period = st.selectbox("History", list(PERIOD_OPTIONS.keys()))

# Stable precision so repeated lookups hit the backend cache
lat, lon = f"{lat:.4f}", f"{lon:.4f}"
aqi, weather, aqi_history, weather_history = asyncio.run(fetch_dashboard(lat, lon, PERIOD_OPTIONS[selected_period]))

col1, col2 = st.columns([1, 2])
with col1:
    if aqi :
        display_aqi_card(aqi)
    else :
        st.warning("No air quality data available for this location.")

with col2:
    display_map(float(lat), float(lon), marker_label(location, lat, lon))

if weather :
    display_weather(weather)
else :
    st.warning("No weather data available for this location.")

# Data visualization
aqi_df = history_frame(aqi_history)
weather_df = history_frame(weather_history)
if aqi_df.empty and weather_df.empty :
    st.info("No historical data for the selected period.")
else :
    display_charts(aqi_df, weather_df)
