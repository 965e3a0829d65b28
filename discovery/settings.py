"""Settings for the discovery engine with observability and ranking knobs."""

from __future__ import annotations

from typing import Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("discovery-engine", "SERVICE_NAME")
	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")

	# Coarse geohash length for ingested records; 6 chars is roughly 1.2km x 0.6km
	geohash_precision: int = _env_field(6, "GEOHASH_PRECISION")

	search_default_limit: int = _env_field(20, "SEARCH_DEFAULT_LIMIT")
	search_max_limit: int = _env_field(100, "SEARCH_MAX_LIMIT")

	# JSON file overriding the default ranking weights
	ranking_calibration_path: Optional[str] = _env_field(None, "RANKING_CALIBRATION_PATH")
	# Feature flag: when off, trust maps are ignored by every composite score
	rank_trust_enabled: bool = _env_field(True, "RANK_TRUST_ENABLED")

	def is_prod(self) -> bool:
		return self.environment.lower() in ("prod", "production", "live")

	def is_dev(self) -> bool:
		return self.environment.lower() in ("dev", "development")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	@field_validator("obs_log_level", mode="before")
	def _normalise_level(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return "INFO"
		return str(value).strip().upper()

	@field_validator("geohash_precision")
	def _check_precision(cls, value: int) -> int:
		if not 1 <= value <= 12:
			raise ValueError("geohash_precision must be between 1 and 12")
		return value


settings = Settings()
