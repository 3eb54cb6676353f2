"""Configuration model for the selection rule engine."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class PrometheusSettings(BaseModel):
    """Decision counters; pushing also needs PROMETHEUS_PUSHGATEWAY_URL."""

    enabled: bool = True
    job: str = Field(default="procurement_engine", min_length=1)
    pushgateway_url: str | None = Field(default=None, min_length=1)

    model_config = ConfigDict(extra="forbid")


class EngineConfig(BaseModel):
    """Structured engine configuration.

    JSON example:
        {
          "scope": "site-lyon",
          "event_log_path": "var/decisions.jsonl",
          "prometheus": {"job": "procurement"}
        }

    The rules themselves are not configurable: these settings only decide how
    decisions are observed.
    """

    scope: str = Field(..., min_length=1)
    logger_name: str = Field(default="procurement_engine.decisions", min_length=1)
    event_log_path: str | None = Field(default=None, min_length=1)
    prometheus: PrometheusSettings | None = None

    # Free-form settings for the embedding service, untouched by the engine.
    extra: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid")

    @classmethod
    def from_json_obj(cls, config_obj: dict[str, Any]) -> EngineConfig:
        """Create an EngineConfig instance from a JSON-compatible object."""
        return cls.model_validate(config_obj)

    @model_validator(mode="after")
    def validate_scope(self) -> EngineConfig:
        """Scope is used as a metrics label: no surrounding whitespace."""
        if self.scope != self.scope.strip():
            raise ValueError("scope must not have leading or trailing whitespace")
        return self
