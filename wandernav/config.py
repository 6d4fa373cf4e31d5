# wandernav/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application
    app_env: Literal["dev", "staging", "prod"] = "dev"
    log_level: str = "INFO"
    log_json: bool = False

    # Backend API
    api_base_url: str = "http://10.194.56.250:8080"  # LAN address used by the Android emulator
    search_timeout_seconds: float = 10.0
    weather_timeout_seconds: float = 10.0
    auth_timeout_seconds: float = 15.0

    # Search behaviour
    search_debounce_ms: int = 800
    search_min_query_length: int = 2
    # Synthetic results when /api/search is unreachable.
    # Results are marked source="fallback" so the UI can label them.
    search_fallback_enabled: bool = True
    avatar_url_template: str = "https://i.pravatar.cc/80?u={id}"

    # Device location
    location_timeout_ms: int = 7000
    location_accuracy: Literal["lowest", "low", "balanced", "high", "highest"] = "balanced"

    @property
    def is_production(self) -> bool:
        return self.app_env == "prod"

    @property
    def is_staging(self) -> bool:
        return self.app_env == "staging"

    @property
    def api_url(self) -> str:
        """Base URL without a trailing slash"""
        return self.api_base_url.rstrip("/")

    def validate_required_for_production(self) -> list[str]:
        """Validate that required settings exist for production"""
        if not self.is_production:
            return []

        problems = []

        if not self.api_base_url.strip():
            problems.append("api_base_url")
        if self.search_debounce_ms < 0:
            problems.append("search_debounce_ms (must be >= 0)")
        if self.location_timeout_ms <= 0:
            problems.append("location_timeout_ms (must be > 0)")

        return problems


def warn_on_risky_config(s: "Settings") -> list[str]:
    warnings: list[str] = []

    # --- Degraded mode ---
    if s.is_production and s.search_fallback_enabled:
        warnings.append(
            "prod: search_fallback_enabled=True (network failures show synthetic search results)."
        )

    # --- Transport ---
    if s.is_production and s.api_base_url.startswith("http://"):
        warnings.append("prod: api_base_url uses plain http (credentials are sent on /api/auth/*).")

    # --- Timing ---
    if s.search_min_query_length < 1:
        warnings.append("search_min_query_length < 1: every keystroke will hit /api/search.")
    if s.search_debounce_ms < 200:
        warnings.append(
            f"search_debounce_ms={s.search_debounce_ms} is very low (expect a request per keystroke)."
        )
    if s.location_timeout_ms < 1000:
        warnings.append(
            f"location_timeout_ms={s.location_timeout_ms} is very low (GPS fixes will mostly time out)."
        )

    return warnings


def validate_or_warn(s: "Settings") -> None:
    """
    In prod: enforce required settings (hard fail).
    In non-prod: warn only.
    """
    missing = s.validate_required_for_production()

    if missing:
        raise RuntimeError(f"Invalid settings for production: {', '.join(missing)}")

    for msg in warn_on_risky_config(s):
        print(f"[WARN][config] {msg}")

settings = Settings()
validate_or_warn(settings)
