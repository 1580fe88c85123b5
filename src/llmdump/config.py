"""Configuration management with Pydantic models."""

import tomllib
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path.home() / ".llmdump" / "config.toml"


class ExportMode(str, Enum):
    """How categorized documents are concatenated on export."""

    SINGLE = "single"
    MULTIPLE = "multiple"


class CleanupMode(str, Enum):
    """Which cleaner polishes document bodies during export."""

    NONE = "none"
    LOCAL = "local"
    AI = "ai"


class CrawlConfig(BaseModel):
    """Configuration for the crawl provider."""

    api_url: str = "https://api.firecrawl.dev"
    api_key: str | None = None
    limit: int = Field(default=50, ge=1, le=10000)
    poll_interval_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    timeout_seconds: float = Field(default=60.0, ge=1.0, le=600.0)
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_base_delay: float = Field(default=3.0, ge=0.0, le=60.0)


class OracleConfig(BaseModel):
    """Configuration for the text-generation oracle."""

    api_key: str | None = None
    base_url: str | None = None
    model: str = "gpt-4o-mini"
    temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    timeout_seconds: float = Field(default=120.0, ge=1.0, le=900.0)
    max_retries: int = Field(default=3, ge=0, le=10)


class StorageConfig(BaseModel):
    """Configuration for session storage."""

    data_dir: Path = Path(".data")

    @property
    def history_dir(self) -> Path:
        return self.data_dir / "history"

    @property
    def pointer_file(self) -> Path:
        return self.data_dir / "current"


class ExportConfig(BaseModel):
    """Defaults for document export."""

    mode: ExportMode = ExportMode.SINGLE
    cleanup: CleanupMode = CleanupMode.AI


class AppConfig(BaseModel):
    """Main application configuration."""

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    oracle: OracleConfig = Field(default_factory=OracleConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    verbose: bool = False

    @classmethod
    def from_toml(cls, path: Path) -> "AppConfig":
        """Load config from a TOML file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)
        return cls.model_validate(data)

    @classmethod
    def load(cls, path: Path = DEFAULT_CONFIG_PATH) -> "AppConfig":
        """Load config from ``path``, falling back to defaults if it does not exist."""
        if not path.exists():
            return cls()
        return cls.from_toml(path)

    def to_toml(self) -> str:
        """Serialize config to TOML format."""
        data = self.model_dump(mode="json", exclude_defaults=True, exclude_none=True)
        return _dict_to_toml(data)

    def save(self, path: Path = DEFAULT_CONFIG_PATH) -> Path:
        """Write config to ``path`` as TOML, creating the parent directory."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.to_toml(), encoding="utf-8")
        return path


def mask_secret(value: str | None) -> str:
    """Render an API key for display, keeping only the last four characters."""
    if not value:
        return "Not set"
    return "•" * 5 + value[-4:]


def _toml_value(v: object) -> str:
    """Format a Python value as a TOML literal."""
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, int):
        return str(v)
    if isinstance(v, float):
        return f"{v}"
    if isinstance(v, str):
        escaped = v.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    if isinstance(v, list):
        items = ", ".join(_toml_value(i) for i in v)
        return f"[{items}]"
    return f'"{v}"'


def _dict_to_toml(data: dict, prefix: str = "") -> str:
    """Convert a nested dict to TOML string (2 levels deep max)."""
    lines: list[str] = []
    # Top-level scalars must precede any table header
    for k, v in data.items():
        if not isinstance(v, dict):
            lines.append(f"{k} = {_toml_value(v)}")
    for k, v in data.items():
        if isinstance(v, dict) and v:
            section = f"{prefix}{k}" if not prefix else f"{prefix}.{k}"
            lines.append(f"\n[{section}]")
            for sk, sv in v.items():
                lines.append(f"{sk} = {_toml_value(sv)}")
    return "\n".join(lines) + "\n"
