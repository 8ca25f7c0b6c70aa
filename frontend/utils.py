#file: frontend/utils.py

import pandas as pd

PERIOD_OPTIONS = {"Last 24 hours" : "daily", "Last 7 days" : "weekly", "Last month" : "monthly"}

LEVEL_COLORS = {
    "Good" : "#00e400",
    "Moderate" : "#ffff00",
    "Unhealthy for Sensitive Groups" : "#ff7e00",
    "Unhealthy" : "#ff0000",
    "Very Unhealthy" : "#8f3f97",
    "Hazardous" : "#7e0023",
}


def aqi_color(level) :
    """Colour used for an AQI level card, grey when the level is unknown."""
    return LEVEL_COLORS.get(level, "#9e9e9e")


def history_frame(points) :
    """Convert historical series points into a DataFrame sorted by timestamp."""
    if not points :
        return pd.DataFrame()

    df = pd.DataFrame(points)
    df["timestamp"] = pd.to_datetime(df["timestamp"])
    df = df.sort_values(by = "timestamp").reset_index(drop = True)

    return df


def forecast_frame(forecast) :
    """Flatten forecast days into a table with max/min temperature columns."""
    rows = [
        {"Day" : day["day"], "Date" : day["date"], "Condition" : day["condition"],
            "Max °C" : day["temperature"]["max"], "Min °C" : day["temperature"]["min"],
            "Rain %" : day.get("precipitation_probability"), "UV" : day.get("uv_index")}
        for day in forecast or []
    ]
    return pd.DataFrame(rows)


def marker_label(location, lat, lon) :
    """Detected place name while the inputs still point at it, a generic label once edited."""
    if f"{location['lat']:.4f}" == f"{float(lat):.4f}" and f"{location['lon']:.4f}" == f"{float(lon):.4f}" :
        return location["name"]
    return "Selected location"
