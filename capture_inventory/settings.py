# capture_inventory/settings.py
"""
Environment-driven pipeline settings.

Environment
-----------
CAPINV_VISION_MODEL        : default "gpt-4o"
CAPINV_VISION_TIMEOUT_S    : default "60"
CAPINV_VISION_MAX_RETRIES  : default "1"
CAPINV_VISION_MAX_TOKENS   : default "1500"
CAPINV_VISION_TEMPERATURE  : default "0.2"
CAPINV_IO_TIMEOUT_S        : default "15"
CAPINV_IO_MAX_RETRIES      : default "2"
CAPINV_IO_BACKOFF_S        : default "0.5"
CAPINV_LISTENER_QUEUE      : default "64"
CAPINV_DEBUG               : "1"/"true"/"yes"/"on" enables debug logging
CAPINV_LOG_FILE            : optional rotating log file path
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field

from capture_inventory.core.retry import RetryPolicy

_TRUTHY = {"1", "true", "yes", "on"}


class PipelineSettings(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    vision_model: str = Field("gpt-4o", description="Multimodal model used for item detection.")
    vision_timeout_s: float = Field(60.0, gt=0, description="Bound on one vision call.")
    vision_max_retries: int = Field(1, ge=0, description="Vision retries after the first attempt.")
    vision_max_tokens: int = Field(1500, ge=1)
    vision_temperature: float = Field(0.2, ge=0, le=2)

    io_timeout_s: float = Field(15.0, gt=0, description="Bound on one store read/write.")
    io_max_retries: int = Field(2, ge=0, description="Store retries after the first attempt.")
    io_backoff_s: float = Field(0.5, ge=0, description="Base backoff; doubled per retry.")

    listener_queue_size: int = Field(64, ge=1, description="Per-listener event buffer; overflow drops events.")

    debug: bool = False
    log_file: str | None = None

    @property
    def vision_policy(self) -> RetryPolicy:
        return RetryPolicy(
            timeout_s=self.vision_timeout_s,
            max_retries=self.vision_max_retries,
            backoff_s=self.io_backoff_s,
        )

    @property
    def io_policy(self) -> RetryPolicy:
        return RetryPolicy(
            timeout_s=self.io_timeout_s,
            max_retries=self.io_max_retries,
            backoff_s=self.io_backoff_s,
        )


_ENV_FIELDS: dict[str, str] = {
    "CAPINV_VISION_MODEL": "vision_model",
    "CAPINV_VISION_TIMEOUT_S": "vision_timeout_s",
    "CAPINV_VISION_MAX_RETRIES": "vision_max_retries",
    "CAPINV_VISION_MAX_TOKENS": "vision_max_tokens",
    "CAPINV_VISION_TEMPERATURE": "vision_temperature",
    "CAPINV_IO_TIMEOUT_S": "io_timeout_s",
    "CAPINV_IO_MAX_RETRIES": "io_max_retries",
    "CAPINV_IO_BACKOFF_S": "io_backoff_s",
    "CAPINV_LISTENER_QUEUE": "listener_queue_size",
    "CAPINV_LOG_FILE": "log_file",
}


def load_settings(env: Mapping[str, str] | None = None) -> PipelineSettings:
    """Read settings from `env` (defaults to os.environ); unset or blank values keep defaults."""
    source = os.environ if env is None else env
    values: dict[str, object] = {}
    for var, field_name in _ENV_FIELDS.items():
        raw = source.get(var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()
    values["debug"] = source.get("CAPINV_DEBUG", "").strip().lower() in _TRUTHY
    return PipelineSettings.model_validate(values)


__all__ = ["PipelineSettings", "load_settings"]
