"""Configuration management for Change Extractor."""

import json
import logging
from pathlib import Path
from typing import List, Optional, Any, Literal

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

CONFIG_DIR_NAME = ".change-extractor"
CONFIG_FILE_NAME = "config.json"


class GitConfig(BaseModel):
    """Configuration for the git history backend."""

    timeout: int = Field(default=60, description="Git command timeout in seconds")
    date_format: str = Field(
        default="iso-strict",
        description="Value passed to git log --date for commit dates",
    )
    context_lines: int = Field(
        default=3, ge=0, le=50, description="Unified diff context lines per commit"
    )
    diff_workers: int = Field(
        default=4, description="Number of commits whose diffs are fetched in parallel"
    )
    all_refs: bool = Field(
        default=False,
        description="Read the log of every ref (git log --all) instead of HEAD only",
    )

    @field_validator("diff_workers")
    @classmethod
    def at_least_one_worker(cls, v: int) -> int:
        """Reject worker counts below one."""
        if v < 1:
            raise ValueError("diff_workers must be at least 1")
        return v


class CatalogConfig(BaseModel):
    """Configuration for the structured-record catalog probe."""

    mode: Literal["offline", "command"] = Field(
        default="offline",
        description="'offline' answers from known_names, 'command' runs a shell command per name",
    )
    known_names: List[str] = Field(
        default_factory=list,
        description="Dataset names reported as existing in offline mode",
    )
    command: Optional[str] = Field(
        default=None,
        description="Shell command template with a {name} placeholder (command mode)",
    )
    exists_exit_codes: List[int] = Field(
        default=[0], description="Exit codes meaning the dataset exists"
    )
    not_found_exit_codes: List[int] = Field(
        default=[4], description="Exit codes meaning the dataset is not catalogued"
    )
    timeout: int = Field(default=30, description="Probe command timeout in seconds")
    max_retries: int = Field(
        default=2, description="Retries for probes that time out or fail to start"
    )
    retry_delay: float = Field(
        default=0.5, description="Initial delay between retries in seconds"
    )


class Config(BaseModel):
    """Main configuration for Change Extractor."""

    repo_dir: Path = Field(default=Path("."), description="Git repository to read")
    git: GitConfig = Field(default_factory=GitConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)

    @field_validator("repo_dir", mode="before")
    @classmethod
    def convert_path(cls, v: Any) -> Path:
        """Convert string paths to Path objects."""
        if isinstance(v, str):
            return Path(v)
        if isinstance(v, Path):
            return v
        raise ValueError(f"Expected str or Path, got {type(v)}")


class ConfigManager:
    """Manages configuration loading, saving, and validation."""

    DEFAULT_CONFIG_PATH = Path(CONFIG_DIR_NAME) / CONFIG_FILE_NAME

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self.DEFAULT_CONFIG_PATH
        self._config: Optional[Config] = None

    def load(self) -> Config:
        """Load configuration from file or fall back to defaults."""
        if self.config_path.exists():
            try:
                with open(self.config_path, "r") as f:
                    data = json.load(f)

                if "repo_dir" in data:
                    data["repo_dir"] = str(self._resolve_relative_path(data["repo_dir"]))

                self._config = Config(**data)
            except Exception as e:
                raise ValueError(f"Failed to load config from {self.config_path}: {e}")
        else:
            self._config = Config()

        return self._config

    def save(self, config: Optional[Config] = None) -> None:
        """Save configuration to file, storing repo_dir relative to the project."""
        if config is None:
            config = self._config

        if config is None:
            raise ValueError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        config_dict = config.model_dump(mode="json")
        config_dict["repo_dir"] = self._make_relative_to_config(config.repo_dir)

        with open(self.config_path, "w") as f:
            json.dump(config_dict, f, indent=2)
        self._config = config

    def get_config(self) -> Config:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            self.load()
        if self._config is None:
            raise RuntimeError("Failed to load configuration")
        return self._config

    def create_default_config(self, repo_dir: Path = Path(".")) -> Config:
        """Create and save a default configuration for the given repository."""
        config = Config(repo_dir=repo_dir)
        self._config = config
        self.save()
        return config

    @property
    def project_root(self) -> Path:
        """Directory containing the .change-extractor/ folder."""
        return self.config_path.parent.parent

    @staticmethod
    def find_config_path(start_dir: Optional[Path] = None) -> Optional[Path]:
        """Find .change-extractor/config.json by walking up the directory tree.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Path to config.json if found, None otherwise
        """
        current = Path(start_dir) if start_dir else Path.cwd()

        for path in [current] + list(current.parents):
            config_path = path / CONFIG_DIR_NAME / CONFIG_FILE_NAME
            if config_path.exists():
                return config_path

        return None

    @classmethod
    def create_with_backtrack(cls, start_dir: Optional[Path] = None) -> "ConfigManager":
        """Create ConfigManager from the nearest config, or a default path under start_dir."""
        config_path = cls.find_config_path(start_dir)
        if config_path is None:
            start = Path(start_dir) if start_dir else Path.cwd()
            config_path = start / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        return cls(config_path)

    def _make_relative_to_config(self, path: Path) -> str:
        """Convert an absolute path to a path relative to the project root."""
        if not path.is_absolute():
            return str(path)

        try:
            relative_path = path.resolve().relative_to(self.project_root.resolve())
            return str(relative_path)
        except ValueError:
            # Outside the project root
            return str(path.resolve())

    def _resolve_relative_path(self, path_str: str) -> Path:
        """Resolve a path stored in the config relative to the project root."""
        path = Path(path_str)
        if path.is_absolute():
            return path
        return (self.project_root / path).resolve()
