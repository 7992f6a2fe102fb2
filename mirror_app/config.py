"""Configuration helpers for the Daily Mirror outfit engine."""

from dataclasses import dataclass, field, replace
from pathlib import Path
import os
from typing import Dict, Optional


@dataclass(frozen=True)
class ExecutionProfile:
    """Caller-supplied knobs that bound how much work a request performs.

    The profile is passed into the generator, the note writer and the
    orchestrator explicitly; none of them inspect the environment on their own.
    """

    name: str
    max_dress_combinations: int
    max_triple_combinations: int
    max_pair_combinations: int
    max_total_combinations: int
    use_deterministic_selection: bool = True
    skip_remote_calls: bool = False
    treat_empty_history_as_failure: bool = False


PRODUCTION_PROFILE = ExecutionProfile(
    name="production",
    max_dress_combinations=50,
    max_triple_combinations=50,
    max_pair_combinations=10,
    max_total_combinations=20,
    use_deterministic_selection=False,
)

BOUNDED_PROFILE = ExecutionProfile(
    name="bounded",
    max_dress_combinations=8,
    max_triple_combinations=8,
    max_pair_combinations=8,
    max_total_combinations=8,
    use_deterministic_selection=True,
    skip_remote_calls=True,
)

_PROFILES = {profile.name: profile for profile in (PRODUCTION_PROFILE, BOUNDED_PROFILE)}


def get_execution_profile(name: str | None) -> ExecutionProfile:
    """Resolve a named execution profile, defaulting to production."""

    key = (name or "production").strip().lower()
    if key not in _PROFILES:
        raise ValueError(f"Unsupported execution profile '{name}'. Allowed: {sorted(_PROFILES)}")
    return _PROFILES[key]


@dataclass(frozen=True)
class ScoringWeights:
    """Weights for the compatibility blend and the final ranking score.

    Only the relative ordering is meaningful: color harmony outranks style
    consistency, which outranks category balance and formality; confidence
    outranks compatibility and satisfaction, then context, then novelty.
    """

    compatibility: Dict[str, float] = field(
        default_factory=lambda: {
            "color_harmony": 0.4,
            "style_consistency": 0.3,
            "category_balance": 0.2,
            "formality": 0.1,
        }
    )
    final: Dict[str, float] = field(
        default_factory=lambda: {
            "confidence": 0.3,
            "compatibility": 0.25,
            "satisfaction": 0.25,
            "contextual": 0.15,
            "novelty": 0.05,
        }
    )
    preferred_color_bonus: float = 0.03
    color_clash_penalty: float = 0.25

    def __post_init__(self) -> None:
        for label, weights in (("compatibility", self.compatibility), ("final", self.final)):
            total = sum(weights.values())
            if abs(total - 1.0) > 1e-6:
                raise ValueError(f"{label} weights must sum to 1.0, got {total:.3f}")
            if any(value < 0 for value in weights.values()):
                raise ValueError(f"{label} weights must be non-negative")


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass
class MirrorConfig:
    """Configuration values for the outfit engine and its collaborators."""

    openweather_api_key: Optional[str] = None
    default_location: str = "New York"
    google_credentials_path: Optional[str] = None
    calendar_id: Optional[str] = None
    database_path: str = "data/mirror.db"
    execution_profile: ExecutionProfile = PRODUCTION_PROFILE
    weights: ScoringWeights = field(default_factory=ScoringWeights)
    environment: str | None = None

    @classmethod
    def from_env(cls) -> "MirrorConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default; environment variables override the file so secrets never have
        to be written to disk.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("MIRROR_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        profile = get_execution_profile(get_value("execution_profile", "production"))
        deterministic = get_value("deterministic_notes")
        if deterministic is not None:
            profile = replace(profile, use_deterministic_selection=deterministic.lower() in {"1", "true", "yes"})

        return cls(
            openweather_api_key=get_value("openweather_api_key"),
            default_location=str(get_value("default_location", "New York") or "New York"),
            google_credentials_path=get_value("google_credentials_path"),
            calendar_id=get_value("calendar_id"),
            database_path=str(get_value("database_path", "data/mirror.db") or "data/mirror.db"),
            execution_profile=profile,
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a minimal YAML/INI-style config without external dependencies."""

        config: dict[str, str] = {}
        for line in path.read_text().splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config


__all__ = [
    "BOUNDED_PROFILE",
    "DEFAULT_WEIGHTS",
    "ExecutionProfile",
    "MirrorConfig",
    "PRODUCTION_PROFILE",
    "ScoringWeights",
    "get_execution_profile",
]
