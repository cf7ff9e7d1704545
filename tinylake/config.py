"""
Engine settings.

Values come from defaults, then TINYLAKE_* environment variables, then
explicit overrides (the REPL passes its command-line flags here).
"""

import logging
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from .executor.evaluator import CoercionPolicy

ENV_PREFIX = "TINYLAKE_"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class EngineSettings(BaseModel):
    coercion_policy: CoercionPolicy = CoercionPolicy.LENIENT
    log_level: str = "WARNING"
    default_table: str = "data"

    model_config = ConfigDict(extra="ignore", frozen=True)

    @field_validator("coercion_policy", mode="before")
    @classmethod
    def parse_policy(cls, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return CoercionPolicy(value.strip().lower())
            except ValueError:
                raise ValueError(
                    f"coercion_policy must be one of "
                    f"{', '.join(p.value for p in CoercionPolicy)}, got {value!r}"
                )
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
        return level

    @classmethod
    def from_env(
        cls,
        environ: Optional[Dict[str, str]] = None,
        **overrides: Any
    ) -> "EngineSettings":
        """
        Build settings from TINYLAKE_COERCION, TINYLAKE_LOG_LEVEL and
        TINYLAKE_DEFAULT_TABLE, with keyword overrides applied last.
        None overrides are ignored.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        env_map = {
            "COERCION": "coercion_policy",
            "LOG_LEVEL": "log_level",
            "DEFAULT_TABLE": "default_table",
        }
        for suffix, key in env_map.items():
            value = environ.get(ENV_PREFIX + suffix)
            if value:
                data[key] = value
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**data)

    def configure_logging(self) -> None:
        logging.basicConfig(
            level=getattr(logging, self.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
