"""Constant-product AMM accounting and pricing engine."""

from cpamm.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from cpamm.engine import Amm, get_default_engine
from cpamm.state import Holdings, PoolSummary

__version__ = "0.1.0"
__all__ = [
    "Amm",
    "get_default_engine",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "Holdings",
    "PoolSummary",
    "__version__",
]
