"""Configuration loaded from .blogsync.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from blogsync.content.storage import STORAGE_FILENAME, LocalStorage
from blogsync.content.store import RecordStore
from blogsync.integrations.github import DEFAULT_BRANCH, DEFAULT_TIMEOUT, GitHubConfig
from blogsync.settings import SettingsStore
from blogsync.sync.orchestrator import SyncOrchestrator, select_backend

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".blogsync.toml"
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "blogsync" / "config.toml"


class StorageSectionConfig(BaseModel):
    """[storage] section."""

    path: str = STORAGE_FILENAME


class GitHubSectionConfig(BaseModel):
    """[github] section."""

    owner: str = ""
    repo: str = ""
    branch: str = DEFAULT_BRANCH
    token: str = ""


class HttpSectionConfig(BaseModel):
    """[http] section."""

    timeout: float = DEFAULT_TIMEOUT


class BlogSyncConfig(BaseModel):
    """Top-level configuration model."""

    storage: StorageSectionConfig = Field(default_factory=StorageSectionConfig)
    github: GitHubSectionConfig = Field(default_factory=GitHubSectionConfig)
    http: HttpSectionConfig = Field(default_factory=HttpSectionConfig)

    def to_github_config(self) -> GitHubConfig:
        return GitHubConfig(
            owner=self.github.owner,
            repo=self.github.repo,
            branch=self.github.branch or DEFAULT_BRANCH,
            token=self.github.token,
        )

    def storage_path(self) -> Path:
        return Path(self.storage.path).expanduser()


def load_config(path: str | Path | None = None) -> BlogSyncConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .blogsync.toml in CWD
    3. ~/.config/blogsync/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for candidate in (Path(".") / CONFIG_FILENAME, GLOBAL_CONFIG_PATH):
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break

    config = BlogSyncConfig()
    if data:
        try:
            config = BlogSyncConfig.model_validate(data)
        except ValidationError as exc:
            logger.warning("Invalid configuration, using defaults: %s", exc)

    return _apply_env_vars(config)


def merge_cli_overrides(config: BlogSyncConfig, **cli_kwargs: object) -> BlogSyncConfig:
    """Overlay explicitly-set CLI flags (non-None values) onto the config."""
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "storage_path": ("storage", "path"),
        "timeout": ("http", "timeout"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = str(value) if isinstance(value, Path) else value

    return BlogSyncConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: BlogSyncConfig) -> BlogSyncConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "BLOGSYNC_STORAGE_PATH": ("storage", "path"),
        "GITHUB_OWNER": ("github", "owner"),
        "GITHUB_REPO": ("github", "repo"),
        "GITHUB_BRANCH": ("github", "branch"),
        "GITHUB_TOKEN": ("github", "token"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    timeout_raw = os.environ.get("BLOGSYNC_HTTP_TIMEOUT")
    if timeout_raw is not None:
        try:
            data["http"]["timeout"] = float(timeout_raw)
        except ValueError:
            logger.warning("Ignoring non-numeric BLOGSYNC_HTTP_TIMEOUT=%r", timeout_raw)

    return BlogSyncConfig.model_validate(data)


def resolve_github_config(config: BlogSyncConfig, settings: SettingsStore) -> GitHubConfig | None:
    """Prefer a complete [github] config, then stored settings."""
    github = config.to_github_config()
    if github.is_configured:
        return github
    return settings.load()


def build_orchestrator(config: BlogSyncConfig) -> SyncOrchestrator:
    """Wire storage, settings and the backend chosen for this run."""
    storage = LocalStorage(config.storage_path())
    github = resolve_github_config(config, SettingsStore(storage))
    return SyncOrchestrator(
        RecordStore(storage),
        backend=select_backend(github),
        timeout=config.http.timeout,
    )
