# rollcall/config.py
from dataclasses import dataclass
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(ValueError):
    """Raised when scheduling thresholds cannot drive a run."""


class Settings(BaseSettings):
    ENV: str = "dev"
    APP_NAME: str = "Rollcall Scheduler"

    # DB URL - SQLite local by default
    DATABASE_URL: str = "sqlite:///./rollcall.db"

    # Chat webhook used for every notification
    WEBHOOK_URL: Optional[str] = None
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0

    # Placeholders rendered into the "event scheduled" message
    EVENT_TITLE: str = "Game night"
    EVENT_LINK: Optional[str] = None

    # Response tokens (compared trimmed + lower-cased)
    YES_TOKEN: str = "y"
    NO_TOKEN: str = "n"
    MAYBE_TOKEN: str = "?"

    # Scheduling thresholds
    MIN_EVENT_DURATION_HOURS: float = 4.0
    MIN_CONSIDERATION_DURATION_HOURS: float = 2.0
    PLAYER_COMBINATION_THRESHOLD_PERCENTAGE: float = 0.6
    REMINDER_THRESHOLD_PERCENTAGE: float = 0.5
    SHORT_EVENT_WARNING_HOURS: float = 2.0

    # How many days ahead the time-driven run looks
    LOOKAHEAD_DAYS: int = 14

    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Immutable snapshot of the scheduling thresholds for one run.

    Built once per invocation (edit or time-driven) and handed to every
    engine function, so the engine itself never reads global settings.
    """

    min_event_duration_hours: float = 4.0
    min_consideration_duration_hours: float = 2.0
    player_combination_threshold_percentage: float = 0.6
    reminder_threshold_percentage: float = 0.5
    short_event_warning_hours: float = 2.0
    yes_token: str = "y"
    no_token: str = "n"
    maybe_token: str = "?"
    event_title: str = "Game night"
    event_link: Optional[str] = None
    lookahead_days: int = 14

    @classmethod
    def from_settings(cls, settings: Settings) -> "SchedulingConfig":
        return cls(
            min_event_duration_hours=settings.MIN_EVENT_DURATION_HOURS,
            min_consideration_duration_hours=settings.MIN_CONSIDERATION_DURATION_HOURS,
            player_combination_threshold_percentage=settings.PLAYER_COMBINATION_THRESHOLD_PERCENTAGE,
            reminder_threshold_percentage=settings.REMINDER_THRESHOLD_PERCENTAGE,
            short_event_warning_hours=settings.SHORT_EVENT_WARNING_HOURS,
            yes_token=settings.YES_TOKEN.strip().lower(),
            no_token=settings.NO_TOKEN.strip().lower(),
            maybe_token=settings.MAYBE_TOKEN.strip().lower(),
            event_title=settings.EVENT_TITLE,
            event_link=settings.EVENT_LINK,
            lookahead_days=settings.LOOKAHEAD_DAYS,
        )

    def validate(self) -> "SchedulingConfig":
        """
        Check the thresholds before a run starts.

        Raises ConfigurationError listing every bad value, so an operator
        can fix the environment in one go.
        """
        problems: list[str] = []

        if self.min_event_duration_hours <= 0:
            problems.append("MIN_EVENT_DURATION_HOURS must be positive")
        if self.min_consideration_duration_hours <= 0:
            problems.append("MIN_CONSIDERATION_DURATION_HOURS must be positive")
        elif self.min_consideration_duration_hours > self.min_event_duration_hours > 0:
            problems.append(
                "MIN_CONSIDERATION_DURATION_HOURS must not exceed MIN_EVENT_DURATION_HOURS"
            )
        if self.short_event_warning_hours <= 0:
            problems.append("SHORT_EVENT_WARNING_HOURS must be positive")
        if not 0 < self.player_combination_threshold_percentage <= 1:
            problems.append("PLAYER_COMBINATION_THRESHOLD_PERCENTAGE must be in (0, 1]")
        if not 0 < self.reminder_threshold_percentage <= 1:
            problems.append("REMINDER_THRESHOLD_PERCENTAGE must be in (0, 1]")
        if self.lookahead_days < 0:
            problems.append("LOOKAHEAD_DAYS must not be negative")

        tokens = [self.yes_token, self.no_token, self.maybe_token]
        if any(not t for t in tokens):
            problems.append("YES_TOKEN, NO_TOKEN and MAYBE_TOKEN must not be blank")
        elif len(set(tokens)) != len(tokens):
            problems.append("YES_TOKEN, NO_TOKEN and MAYBE_TOKEN must be distinct")

        if problems:
            raise ConfigurationError("; ".join(problems))
        return self


def get_scheduling_config() -> SchedulingConfig:
    """FastAPI dependency: a fresh SchedulingConfig per request."""
    return SchedulingConfig.from_settings(get_settings())
