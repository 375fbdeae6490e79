from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql://postgres:postgres@db:5432/hydrobuddy"

    # IANA timezone defining "today" for daily/weekly windows
    app_timezone: str = "UTC"

    # Photo and avatar storage root
    upload_dir: str = "uploads"

    # Goals
    default_daily_goal: int = 2000
    default_goal_unit: str = "ml"
    max_intake_amount: int = 5000
    intake_history_limit: int = 500

    # Friend codes
    friend_code_length: int = 6
    friend_code_max_attempts: int = 10

    # Aggregation bounds
    streak_lookback_days: int = 365
    leaderboard_all_time_cap: int = 1000  # most recent records per user

    # Activity feed
    activity_feed_limit: int = 20
    activity_intakes_per_friend: int = 5
    activity_window_hours: int = 24
    streak_milestone_interval: int = 7

    # Auth settings
    session_cookie_name: str = "hydrobuddy_session"
    session_max_age: int = 86400 * 7  # 7 days
    session_cookie_secure: bool = False  # True in production

    @field_validator("app_timezone")
    @classmethod
    def validate_app_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone {value!r}") from e
        return value

    class Config:
        env_file = ".env"


settings = Settings()
