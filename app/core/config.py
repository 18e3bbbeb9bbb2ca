from typing import Optional

from atams import AtamsBaseSettings


class Settings(AtamsBaseSettings):
    """
    Application Settings

    Inherits from AtamsBaseSettings which includes:
    - DATABASE_URL (required)
    - ATLAS_SSO_URL, ATLAS_APP_CODE, ATLAS_ENCRYPTION_KEY, ATLAS_ENCRYPTION_IV
    - ENCRYPTION_ENABLED, ENCRYPTION_KEY, ENCRYPTION_IV (response encryption)
    - LOGGING_ENABLED, LOG_LEVEL, LOG_TO_FILE, LOG_FILE_PATH
    - CORS_ORIGINS, CORS_ALLOW_CREDENTIALS, CORS_ALLOW_METHODS, CORS_ALLOW_HEADERS
    - RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW
    - DEBUG

    All settings can be overridden via .env file or by redefining them here.
    """
    APP_NAME: str = "WorkforceOne Security"
    APP_VERSION: str = "1.0.0"

    # Geofence settings
    GEOFENCE_ENFORCED: bool = True
    DEFAULT_GEOFENCE_RADIUS_M: int = 100
    GEOFENCE_ALERT_COOLDOWN_SECONDS: int = 300

    # Patrols left "started" longer than this are swept to "incomplete"
    PATROL_ABANDON_AFTER_HOURS: int = 24

    # Attendance analytics
    ATTENDANCE_WINDOW_DAYS: int = 30
    ATTENDANCE_TIMEZONE: Optional[str] = None  # e.g. "Asia/Jakarta"; None keeps recorded wall clock
    WORK_START_HOUR: int = 9
    WORK_END_HOUR: int = 17


settings = Settings()
