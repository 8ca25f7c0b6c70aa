#file: frontend/ui_elements.py

import streamlit as st
import pandas as pd
import plotly.express as px

from frontend.utils import aqi_color, forecast_frame


def display_map(lat, lon, name) :
    """Display a map with the selected location."""
    location_df = pd.DataFrame([{"lat" : lat, "lon" : lon, "name" : name, "size" : 10}])

    fig_map = px.scatter_mapbox(
        location_df,
        lat = "lat",
        lon = "lon",
        hover_name = "name",
        size = "size",
        color_discrete_sequence = ["red"],
        zoom = 9,
        height = 350,
        title = "Location"
    )
    fig_map.update_layout(
        mapbox_style = "open-street-map",
        margin = {
            "r" : 0,
            "t" : 30,
            "l" : 0,
            "b" : 0
        }
    )

    st.plotly_chart(fig_map)


def display_aqi_card(aqi) :
    """Display the current AQI, its level and the health recommendation."""
    color = aqi_color(aqi["level"])
    st.markdown(
        f"<div style='border-left: 8px solid {color}; padding: 0.5rem 1rem'>"
        f"<h2 style='margin: 0'>AQI: {aqi['aqi']}</h2>"
        f"<h4 style='margin: 0'>{aqi['level']}</h4>"
        f"<p>{aqi['recommendation']}</p></div>",
        unsafe_allow_html = True
    )
    col1, col2, col3 = st.columns(3)
    col1.metric("PM2.5 (µg/m³)", f"{aqi['pm25']:.1f}")
    col2.metric("PM10 (µg/m³)", f"{aqi['pm10']:.1f}")
    col3.metric("Source", aqi["source"])


def display_weather(weather) :
    """Display current conditions and the daily forecast."""
    st.subheader(f"{weather['condition']} in {weather['location'].title()}")
    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Temperature", f"{weather['temperature']} °C", f"feels like {weather['feelsLike']} °C",
                delta_color = "off")
    col2.metric("Humidity", f"{weather['humidity']} %")
    col3.metric("Wind", f"{weather['windSpeed']} km/h")
    col4.metric("UV index", weather["uvIndex"])
    st.caption(f"Sunrise {weather['sunrise']} · Sunset {weather['sunset']} · Visibility {weather['visibility']} km")

    forecast = forecast_frame(weather.get("forecast"))
    if not forecast.empty :
        st.dataframe(forecast, hide_index = True)


def display_charts(aqi_df, weather_df) :
    """Display line charts for historical air quality and weather data."""
    series = [
        (aqi_df, ["aqi", "aqi_us"], "Air Quality Index"),
        (aqi_df, ["pm2_5", "pm10"], "Particulate matter (µg/m³)"),
        (aqi_df, ["no2", "so2", "o3"], "Gases (µg/m³)"),
        (weather_df, ["temperature"], "Temperature (°C)"),
        (weather_df, ["humidity"], "Relative humidity (%)"),
    ]

    for data_frame, columns, title in series :
        columns = [column for column in columns if column in data_frame.columns and data_frame[column].notna().any()]
        if not columns :
            continue
        fig = px.line(
            data_frame,
            x = "timestamp",
            y = columns,
            title = title,
            labels = {
                "timestamp" : "Time",
                "value" : title,
                "variable" : "Series"
            }
        )
        fig.update_layout(
            legend=dict(
                orientation="h",
                yanchor="top",
                y=-0.2,
                xanchor="center",
                x=0.5
            )
        )
        st.plotly_chart(fig)
