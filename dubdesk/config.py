"""Configuration loading and management."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


DEFAULT_EDITABLE_STATUSES = [
    "pending",
    "approved",
    "revision-requested",
    "needs-rerecord",
    "voice-over-added",
]


class ReviewConfig(BaseModel):
    """Dialogue review behaviour."""

    autosave_delay_seconds: float = 30.0
    notice_seconds: float = 3.0
    success_notice_seconds: float = 2.0
    advance_after_save: bool = True


class SyncConfig(BaseModel):
    """Persistence API settings."""

    base_url: str = "http://localhost:3000/api"
    timeout_seconds: float = 30.0


class PlaybackConfig(BaseModel):
    """Media playback and converted-audio polling."""

    poll_max_attempts: int = 30
    poll_interval_seconds: float = 2.0
    storage_base_url: str = "https://storage.example.com"


class VoicesConfig(BaseModel):
    """Voice assignment rules."""

    editable_statuses: list[str] = Field(default_factory=lambda: list(DEFAULT_EDITABLE_STATUSES))
    output_root: str = ""


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"


class Config(BaseModel):
    """Main application configuration."""

    review: ReviewConfig = Field(default_factory=ReviewConfig)
    sync: SyncConfig = Field(default_factory=SyncConfig)
    playback: PlaybackConfig = Field(default_factory=PlaybackConfig)
    voices: VoicesConfig = Field(default_factory=VoicesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "Config":
        """Load configuration from a YAML file."""
        path = Path(path)
        if not path.exists():
            return cls()

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            return cls()

        return cls(**data)

    def to_yaml(self, path: Path | str) -> None:
        """Save configuration to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump()
        with open(path, "w") as f:
            yaml.dump(data, f, default_flow_style=False)


def load_config(config_path: Path | str | None = None) -> Config:
    """Load configuration from file or use defaults."""
    if config_path is None:
        # Look for config.yaml in current directory or project root
        candidates = [Path("config.yaml"), Path(__file__).parent.parent / "config.yaml"]
        for candidate in candidates:
            if candidate.exists():
                config_path = candidate
                break

    if config_path is not None:
        return Config.from_yaml(config_path)

    return Config()
