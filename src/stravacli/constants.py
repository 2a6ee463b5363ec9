"""
Constants shared across stravacli.

Everything here is immutable; runtime configuration lives in ``config.Settings``.
"""

STRAVA_API_BASE = "https://www.strava.com/api/v3"
STRAVA_AUTHORIZE_URL = "https://www.strava.com/oauth/authorize"
STRAVA_TOKEN_URL = "https://www.strava.com/oauth/token"
STRAVA_ACTIVITY_URL = "https://www.strava.com/activities"

ACCESS_TOKEN_ENV_VAR = "STRAVA_ACCESS_TOKEN"

# Download paging
DEFAULT_PAGE_SIZE = 25

# Seconds between upload status checks
DEFAULT_POLL_INTERVAL = 1.0

DEFAULT_AUTH_PORT = 8080
READ_SCOPE = "activity:read_all"
WRITE_SCOPE = "activity:read_all,activity:write"

# Rows are numbered like lines in the CSV file: the header is row 1.
HEADER_ROW = 1
FIRST_DATA_ROW = HEADER_ROW + 1

DAY_FORMAT = "%Y-%m-%d"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
LOCAL_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

VALID_ACTIVITY_TYPES = frozenset(
    {
        "AlpineSki",
        "BackcountrySki",
        "Canoeing",
        "Crossfit",
        "EBikeRide",
        "Elliptical",
        "Golf",
        "Handcycle",
        "Hike",
        "IceSkate",
        "InlineSkate",
        "Kayaking",
        "Kitesurf",
        "NordicSki",
        "Ride",
        "RockClimbing",
        "RollerSki",
        "Rowing",
        "Run",
        "Sail",
        "Skateboard",
        "Snowboard",
        "Snowshoe",
        "Soccer",
        "StairStepper",
        "StandUpPaddling",
        "Surfing",
        "Swim",
        "Velomobile",
        "VirtualRide",
        "VirtualRun",
        "Walk",
        "WeightTraining",
        "Wheelchair",
        "Windsurf",
        "Workout",
        "Yoga",
    }
)

VALID_FILE_TYPES = frozenset({"fit", "fit.gz", "tcx", "tcx.gz", "gpx", "gpx.gz"})
