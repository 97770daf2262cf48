DOMAIN = "hazard_alert"
VERSION = "0.1.0"

# Config entry keys
CONF_ENTRY_NAME = "entry_name"
CONF_SOURCE_ENTITY = "source_entity"
CONF_FALLBACK_LATITUDE = "fallback_latitude"
CONF_FALLBACK_LONGITUDE = "fallback_longitude"
CONF_FETCH_WEATHER = "fetch_weather"
CONF_CUE_MEDIA_PLAYER = "cue_media_player"
CONF_CUE_MEDIA_URL = "cue_media_url"

# Proximity scan constants (not user-editable)
INNER_BOUND_KM = 0.1        # exclusive: closer than this counts as already passed
OUTER_BOUND_KM = 3.2        # inclusive: roughly two miles
TICK_INTERVAL = 5.0         # seconds between proximity scans
ALERT_DURATION = 8.0        # seconds an alert stays active without a new trigger

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0       # flat approximation, display only

# Coordinator intervals (seconds)
POSITION_INTERVAL = 10      # poll of the source entity, in addition to state-change events
WEATHER_INTERVAL = 900      # weather snapshot refresh

# Hazards are re-requested from the source once the position has moved this far
# from the point of the previous request.
HAZARD_REFRESH_DISTANCE_KM = 1.0

# Mock hazard generation around the live position
SIMULATED_HAZARD_COUNT = 3
SIMULATED_HAZARD_SPREAD = 0.05     # degrees, centred on the position
SIMULATED_MAX_AGE = 3600           # seconds

HAZARD_NAMES = {"speed": "Speed Trap", "checkpoint": "Checkpoint"}
HAZARD_ICONS = {"speed": "mdi:speedometer", "checkpoint": "mdi:police-badge"}

EVENT_PROXIMITY_ALERT = f"{DOMAIN}_proximity"

WEATHER_API_URL = "https://api.open-meteo.com/v1/forecast"
WEATHER_CURRENT_FIELDS = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,precipitation,"
    "weather_code,wind_speed_10m,wind_direction_10m"
)

# Open-Meteo WMO weather code → (description, icon)
WEATHER_DESCRIPTIONS: dict[int, tuple[str, str]] = {
    0:  ("Clear Sky", "mdi:weather-sunny"),
    1:  ("Mainly Clear", "mdi:weather-partly-cloudy"),
    2:  ("Partly Cloudy", "mdi:weather-partly-cloudy"),
    3:  ("Overcast", "mdi:weather-cloudy"),
    45: ("Foggy", "mdi:weather-fog"),
    48: ("Foggy", "mdi:weather-fog"),
    51: ("Light Drizzle", "mdi:weather-partly-rainy"),
    53: ("Drizzle", "mdi:weather-partly-rainy"),
    55: ("Heavy Drizzle", "mdi:weather-rainy"),
    61: ("Light Rain", "mdi:weather-rainy"),
    63: ("Rain", "mdi:weather-rainy"),
    65: ("Heavy Rain", "mdi:weather-pouring"),
    71: ("Light Snow", "mdi:weather-snowy"),
    73: ("Snow", "mdi:weather-snowy"),
    75: ("Heavy Snow", "mdi:weather-snowy-heavy"),
    77: ("Snow Grains", "mdi:weather-snowy"),
    80: ("Light Showers", "mdi:weather-partly-rainy"),
    81: ("Showers", "mdi:weather-rainy"),
    82: ("Heavy Showers", "mdi:weather-pouring"),
    85: ("Light Snow Showers", "mdi:weather-snowy"),
    86: ("Snow Showers", "mdi:weather-snowy-heavy"),
    95: ("Thunderstorm", "mdi:weather-lightning"),
    96: ("Thunderstorm with Hail", "mdi:weather-hail"),
    99: ("Severe Thunderstorm", "mdi:weather-lightning-rainy"),
}
UNKNOWN_WEATHER = ("Unknown", "mdi:thermometer")
