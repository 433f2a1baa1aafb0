"""Engine configuration."""

from __future__ import annotations

import os

import structlog
from pydantic import BaseModel, ConfigDict, Field, field_validator

from cpamm.constants import DEFAULT_FEE_PER_MILLE, MAX_FEE_PER_MILLE

logger = structlog.get_logger()

# Environment variables read by EngineConfig.from_env()
FEE_ENV_VAR = "CPAMM_FEE_PER_MILLE"
LOG_LEVEL_ENV_VAR = "CPAMM_LOG_LEVEL"


class EngineConfig(BaseModel):
    """Centralized configuration for a pool engine.

    Attributes:
        fee_per_mille: Swap fee in parts per thousand of the input (0-999).
            Values of 1000 or more would make the fee divisor zero or
            negative; they are clamped to 0 and a warning is logged.
        log_level: Level name used by configure_logging()
    """

    model_config = ConfigDict(frozen=True)

    fee_per_mille: int = Field(default=DEFAULT_FEE_PER_MILLE, ge=0)
    log_level: str = "INFO"

    @field_validator("fee_per_mille")
    @classmethod
    def clamp_fee(cls, value: int) -> int:
        if value > MAX_FEE_PER_MILLE:
            logger.warning("fee_clamped", requested=value, using=0)
            return 0
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Build a config from environment variables with defaults.

        - CPAMM_FEE_PER_MILLE: Swap fee in per mille (default: 3)
        - CPAMM_LOG_LEVEL: Log level name (default: INFO)
        """
        return cls(
            fee_per_mille=int(os.environ.get(FEE_ENV_VAR, str(DEFAULT_FEE_PER_MILLE))),
            log_level=os.environ.get(LOG_LEVEL_ENV_VAR, "INFO"),
        )


# Default configuration instance
DEFAULT_ENGINE_CONFIG = EngineConfig()
