"""GitHub integration: repository config and Contents API client.

The client is scoped to one repository and branch. Structured reads
and writes go through the REST Contents API; cheap reads go through
raw.githubusercontent.com, which skips the sha round trip.
"""

from __future__ import annotations

import base64
import json
import logging
import os
import urllib.error
import urllib.request
from urllib.parse import quote

from pydantic import BaseModel

from blogsync.shared.errors import (
    ConflictError,
    NotFoundError,
    RemoteWriteError,
    TransportError,
)

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
RAW_BASE = "https://raw.githubusercontent.com"
DEFAULT_BRANCH = "main"
DEFAULT_TIMEOUT = 30.0


class GitHubConfig(BaseModel):
    """Credentials and target for the remote content repository."""

    owner: str = ""
    repo: str = ""
    branch: str = DEFAULT_BRANCH
    token: str = ""

    @property
    def is_configured(self) -> bool:
        return bool(self.owner and self.repo and self.branch and self.token)

    @classmethod
    def from_env(cls) -> GitHubConfig:
        """Create config from environment variables."""
        return cls(
            owner=os.environ.get("GITHUB_OWNER", ""),
            repo=os.environ.get("GITHUB_REPO", ""),
            branch=os.environ.get("GITHUB_BRANCH", DEFAULT_BRANCH),
            token=os.environ.get("GITHUB_TOKEN", ""),
        )


class GitHubContentClient:
    """Path-addressed file access against one repository branch.

    Uses urllib; no retries. ``timeout`` bounds every request.
    """

    def __init__(self, config: GitHubConfig, timeout: float | None = DEFAULT_TIMEOUT) -> None:
        self.config = config
        self.timeout = timeout
        self.repo_url = (
            f"{API_BASE}/repos/{quote(config.owner, safe='')}/{quote(config.repo, safe='')}"
        )

    # ── Transport ────────────────────────────────────────────────

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"token {self.config.token}",
        }

    def _open(self, req: urllib.request.Request) -> bytes:
        logger.debug("%s %s", req.get_method(), req.full_url)
        with urllib.request.urlopen(req, timeout=self.timeout) as resp:
            return resp.read()

    def _request(self, method: str, path: str, data: dict | None = None) -> dict:
        """Make an authenticated request to the repository API.

        HTTP and network errors propagate as urllib exceptions.
        """
        url = f"{self.repo_url}/{path}" if path else self.repo_url
        headers = self._headers()
        body = None
        if data is not None:
            body = json.dumps(data).encode("utf-8")
            headers["Content-Type"] = "application/json"
        req = urllib.request.Request(url, data=body, method=method, headers=headers)
        raw = self._open(req)
        return json.loads(raw.decode("utf-8")) if raw else {}

    def _contents_path(self, path: str) -> str:
        return f"contents/{quote(path, safe='/')}"

    # ── Reads ────────────────────────────────────────────────────

    def read_raw(self, path: str) -> str:
        """Fetch the raw text of ``path`` on the configured branch.

        Raises:
            NotFoundError: The path does not exist.
            TransportError: Any other non-success status or network failure.
        """
        url = (
            f"{RAW_BASE}/{quote(self.config.owner, safe='')}/{quote(self.config.repo, safe='')}"
            f"/{quote(self.config.branch, safe='')}/{quote(path, safe='/')}"
        )
        req = urllib.request.Request(
            url,
            headers={
                "Authorization": f"token {self.config.token}",
                "Cache-Control": "no-cache",
            },
        )
        try:
            return self._open(req).decode("utf-8")
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                raise NotFoundError(path) from exc
            raise TransportError(f"GET {path} failed: {exc.code}", status=exc.code) from exc
        except (urllib.error.URLError, TimeoutError, OSError, UnicodeDecodeError) as exc:
            raise TransportError(f"GET {path} failed: {exc}") from exc

    def read_json(self, path: str) -> object | None:
        """Fetch and parse ``path``; any failure yields None."""
        try:
            text = self.read_raw(path)
        except NotFoundError:
            return None
        except TransportError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Remote %s is not valid JSON, treating as absent", path)
            return None

    def get_version_token(self, path: str) -> str | None:
        """Return the blob sha for ``path``, or None if it does not exist.

        Raises:
            TransportError: The lookup failed for any reason other than 404.
        """
        ref = quote(self.config.branch, safe="")
        try:
            data = self._request("GET", f"{self._contents_path(path)}?ref={ref}")
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                return None
            raise TransportError(f"GET sha for {path} failed: {exc.code}", status=exc.code) from exc
        except (urllib.error.URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
            raise TransportError(f"GET sha for {path} failed: {exc}") from exc
        if isinstance(data, dict) and data.get("sha"):
            return str(data["sha"])
        return None

    def check_access(self) -> bool:
        """Verify the token can read the repository.

        Raises:
            TransportError: The repository root could not be fetched.
        """
        try:
            self._request("GET", "")
        except urllib.error.HTTPError as exc:
            raise TransportError(f"Repository access failed: {exc.code}", status=exc.code) from exc
        except (urllib.error.URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
            raise TransportError(f"Repository access failed: {exc}") from exc
        return True

    # ── Writes ───────────────────────────────────────────────────

    def _sha_for_write(self, path: str) -> str | None:
        try:
            return self.get_version_token(path)
        except TransportError as exc:
            raise RemoteWriteError(str(exc), status=exc.status) from exc

    def put_file(self, path: str, content: str, message: str) -> dict:
        """Create or update ``path`` with ``content`` as a single commit.

        The current sha is sent only when the path already exists.

        Raises:
            ConflictError: The sha was missing or stale (409/422).
            RemoteWriteError: Any other non-success response or network failure.
        """
        sha = self._sha_for_write(path)
        payload: dict = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": self.config.branch,
        }
        if sha:
            payload["sha"] = sha

        try:
            result = self._request("PUT", self._contents_path(path), payload)
        except urllib.error.HTTPError as exc:
            if exc.code in (409, 422):
                raise ConflictError(f"PUT {path} conflicted: {exc.code}", status=exc.code) from exc
            raise RemoteWriteError(f"PUT {path} failed: {exc.code}", status=exc.code) from exc
        except (urllib.error.URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
            raise RemoteWriteError(f"PUT {path} failed: {exc}") from exc

        logger.info("Wrote %s to %s/%s@%s", path, self.config.owner, self.config.repo, self.config.branch)
        return result

    def delete_file(self, path: str, message: str) -> bool:
        """Delete ``path``; returns False when it did not exist.

        Raises:
            ConflictError: The sha was stale (409/422).
            RemoteWriteError: Any other non-success response or network failure.
        """
        sha = self._sha_for_write(path)
        if sha is None:
            return False
        payload = {"message": message, "sha": sha, "branch": self.config.branch}
        try:
            self._request("DELETE", self._contents_path(path), payload)
        except urllib.error.HTTPError as exc:
            if exc.code == 404:
                return False
            if exc.code in (409, 422):
                raise ConflictError(f"DELETE {path} conflicted: {exc.code}", status=exc.code) from exc
            raise RemoteWriteError(f"DELETE {path} failed: {exc.code}", status=exc.code) from exc
        except (urllib.error.URLError, TimeoutError, OSError, json.JSONDecodeError) as exc:
            raise RemoteWriteError(f"DELETE {path} failed: {exc}") from exc

        logger.info("Deleted %s from %s/%s@%s", path, self.config.owner, self.config.repo, self.config.branch)
        return True
