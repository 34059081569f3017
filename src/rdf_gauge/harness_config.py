"""
Evaluation Harness Configuration

Manages loading from environment variables and default values.
"""

import os
from dataclasses import dataclass, field, asdict

from rdf_gauge.domain.constants import (
    DEFAULT_INITIAL_DELAY_MS,
    DEFAULT_JITTER_SECONDS,
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_OUTER_DELAY_SECONDS,
    DEFAULT_OUTER_RETRIES,
)


def _env_int(key: str, default: int) -> int:
    """Convert an environment variable to int"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to an integer.")


def _env_float(key: str, default: float) -> float:
    """Convert an environment variable to float"""
    val = os.environ.get(key)
    if val is None:
        return default
    try:
        return float(val)
    except ValueError:
        raise ValueError(f"The value '{val}' of environment variable '{key}' cannot be converted to a number.")


def _env_optional_float(key: str) -> float | None:
    """Convert an environment variable to float, or None when unset or empty"""
    val = os.environ.get(key)
    if val is None or not val.strip():
        return None
    return _env_float(key, 0.0)


def _env_str(key: str, default: str) -> str:
    """Get an environment variable as a string"""
    return os.environ.get(key, default)


@dataclass
class GenerationConfig:
    """Retry loop and backend call configuration"""
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    timeout_seconds: int = 120
    temperature: float | None = None  # None = backend default

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1.")
        if self.initial_delay_ms <= 0:
            raise ValueError("initial_delay_ms must be positive.")


@dataclass
class EvaluationConfig:
    """Evaluation runner configuration"""
    outer_retries: int = DEFAULT_OUTER_RETRIES
    outer_delay_seconds: float = DEFAULT_OUTER_DELAY_SECONDS
    jitter_seconds: float = DEFAULT_JITTER_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS

    def __post_init__(self):
        if self.outer_retries < 0:
            raise ValueError("outer_retries must be non-negative.")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1.")


@dataclass
class LMStudioConfig:
    """LMStudio (OpenAI-compatible local LLM) configuration"""
    base_url: str = "http://localhost:1234/v1"
    api_key: str = "lm-studio"


@dataclass
class HarnessConfig:
    """Overall evaluation harness configuration"""
    generation: GenerationConfig = field(default_factory=GenerationConfig)
    evaluation: EvaluationConfig = field(default_factory=EvaluationConfig)
    lmstudio: LMStudioConfig = field(default_factory=LMStudioConfig)

    def to_dict(self) -> dict:
        """Convert to dictionary format"""
        return {"harness_config": asdict(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "HarnessConfig":
        """Create from dictionary (handles presence/absence of harness_config key)"""
        config_data = data.get("harness_config", data)
        generation = GenerationConfig(**config_data.get("generation", {}))
        evaluation = EvaluationConfig(**config_data.get("evaluation", {}))
        lmstudio = LMStudioConfig(**config_data.get("lmstudio", {}))
        return cls(
            generation=generation,
            evaluation=evaluation,
            lmstudio=lmstudio,
        )


def load_config() -> HarnessConfig:
    """
    Load configuration from environment variables

    Uses default values when environment variables are not set.

    Returns:
        HarnessConfig
    """
    generation = GenerationConfig(
        max_attempts=_env_int("HARNESS_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS),
        initial_delay_ms=_env_int("HARNESS_INITIAL_DELAY_MS", DEFAULT_INITIAL_DELAY_MS),
        timeout_seconds=_env_int("HARNESS_TIMEOUT_SECONDS", 120),
        temperature=_env_optional_float("HARNESS_TEMPERATURE"),
    )
    evaluation = EvaluationConfig(
        outer_retries=_env_int("HARNESS_OUTER_RETRIES", DEFAULT_OUTER_RETRIES),
        outer_delay_seconds=_env_float("HARNESS_OUTER_DELAY_SECONDS", DEFAULT_OUTER_DELAY_SECONDS),
        jitter_seconds=_env_float("HARNESS_JITTER_SECONDS", DEFAULT_JITTER_SECONDS),
        max_workers=_env_int("HARNESS_MAX_WORKERS", DEFAULT_MAX_WORKERS),
    )
    lmstudio = LMStudioConfig(
        base_url=_env_str("LMSTUDIO_BASE_URL", "http://localhost:1234/v1"),
        api_key=_env_str("LMSTUDIO_API_KEY", "lm-studio"),
    )
    return HarnessConfig(
        generation=generation,
        evaluation=evaluation,
        lmstudio=lmstudio,
    )
