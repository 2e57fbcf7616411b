"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_MAX_DEVICES = 3
NEW_DEVICE_PREFIX = "$"
COOKIE_MAX_AGE = 30 * 24 * 3600  # seconds

# A user id path looks like "/k3j2h4g5f6d7s8a9q0w1e"
USER_ID_PATH_PATTERN = r"^/[a-z0-9]{20,22}$"

MAX_POINTS_PER_DAY = 3
ARRIVAL_HOURS = 0.5
DEPARTURE_HOURS = 0.5

EMAIL_RETRY_INTERVAL_MINUTES = 10
EMAIL_MAX_ATTEMPTS = 20
EMAIL_SENDER_NAME = "Job Conciergerie"

PUBLIC_SITE_URL = "https://job-conciergerie.fr"

UNKNOWN_ZONE_LABEL = "Zone inconnue"
UNKNOWN_HOME_LABEL = "Bien non trouvé"

FRENCH_MONTHS = (
    "Janvier",
    "Février",
    "Mars",
    "Avril",
    "Mai",
    "Juin",
    "Juillet",
    "Août",
    "Septembre",
    "Octobre",
    "Novembre",
    "Décembre",
)
