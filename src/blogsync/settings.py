"""Remote settings saved in local storage by the editor."""

from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from blogsync.content.storage import LocalStorage
from blogsync.content.store import SETTINGS_KEY
from blogsync.integrations.github import DEFAULT_BRANCH, GitHubConfig

logger = logging.getLogger(__name__)


class SettingsStore:
    """Load, save and clear the stored GitHub settings."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage

    def load(self) -> GitHubConfig | None:
        """Return the stored settings, or None if absent or corrupt."""
        raw = self._storage.get_item(SETTINGS_KEY)
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Stored GitHub settings are corrupt, ignoring them")
            return None
        if not isinstance(data, dict):
            return None
        try:
            return GitHubConfig.model_validate(data)
        except ValidationError:
            logger.warning("Stored GitHub settings are invalid, ignoring them")
            return None

    def save(self, config: GitHubConfig) -> GitHubConfig:
        """Persist trimmed settings; a blank branch becomes ``main``."""
        cleaned = GitHubConfig(
            owner=config.owner.strip(),
            repo=config.repo.strip(),
            branch=config.branch.strip() or DEFAULT_BRANCH,
            token=config.token.strip(),
        )
        self._storage.set_item(SETTINGS_KEY, cleaned.model_dump_json())
        return cleaned

    def clear(self) -> None:
        """Reset to an empty settings object, which leaves remote mode off."""
        self._storage.set_item(SETTINGS_KEY, "{}")

    def is_configured(self) -> bool:
        config = self.load()
        return config is not None and config.is_configured
