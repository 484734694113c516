"""Remote repository retrieval via the GitHub contents API."""

from __future__ import annotations

import base64
import json
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from .config import DEFAULT_API_URL, DEFAULT_MAX_DEPTH, DEFAULT_REQUEST_TIMEOUT, GitHubConfig
from .detection import RECOGNIZED_MANIFESTS
from .errors import InvalidInput
from .logging import get_logger
from .models import REPOSITORY_SEGMENT, FileEntry, RepositoryHandle

_URL_PATTERN = re.compile(r"github\.com[/:]([^/\s]+)/([^/?#\s]+)")
_SHORTHAND_PATTERN = re.compile(r"^([^/\s]+)/([^/\s]+)$")

Transport = Callable[[str, Mapping[str, str], float], Any]

logger = get_logger("fetcher")


class FetchError(RuntimeError):
    """Raised when the hosting API cannot satisfy a request."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def parse_repository_reference(reference: str) -> RepositoryHandle:
    """Parse a GitHub URL or ``owner/repo`` shorthand into a handle."""
    if not isinstance(reference, str) or not reference.strip():
        raise InvalidInput("Invalid GitHub URL")
    text = reference.strip()
    match = _URL_PATTERN.search(text) or _SHORTHAND_PATTERN.match(text)
    if not match:
        raise InvalidInput(f"Invalid GitHub URL: {reference}")
    owner, name = match.group(1), match.group(2)
    if name.endswith(".git"):
        name = name[: -len(".git")]
    if not all(REPOSITORY_SEGMENT.fullmatch(part) for part in (owner, name)):
        raise InvalidInput(f"Invalid GitHub URL: {reference}")
    return RepositoryHandle(owner=owner, name=name)


def _urllib_transport(url: str, headers: Mapping[str, str], timeout: float) -> Any:
    request = Request(url, headers=dict(headers), method="GET")
    try:
        with urlopen(request, timeout=timeout) as response:  # type: ignore[arg-type]
            raw = response.read()
    except HTTPError as exc:
        raise FetchError(f"GitHub API returned {exc.code} for {url}", status=exc.code) from exc
    except URLError as exc:
        raise FetchError(f"GitHub API request failed: {exc.reason}") from exc
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise FetchError(f"GitHub API returned invalid JSON for {url}") from exc


class GitHubFetcher:
    """Fetches repository metadata, file listings and manifest contents."""

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        token: str | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
        request_timeout: float = DEFAULT_REQUEST_TIMEOUT,
        transport: Transport | None = None,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token
        self.max_depth = max_depth
        self.request_timeout = request_timeout
        self._transport = transport or _urllib_transport

    @classmethod
    def from_config(
        cls, config: GitHubConfig, *, transport: Transport | None = None
    ) -> "GitHubFetcher":
        return cls(
            api_url=config.api_url,
            token=config.token,
            max_depth=config.max_depth,
            request_timeout=config.request_timeout,
            transport=transport,
        )

    def fetch_metadata(self, handle: RepositoryHandle) -> Dict[str, Any]:
        payload = self._get(self._repo_url(handle))
        if not isinstance(payload, dict):
            raise FetchError(f"Unexpected repository payload for {handle.full_name}")
        return payload

    def fetch_description(self, handle: RepositoryHandle) -> str:
        description = self.fetch_metadata(handle).get("description")
        return description if isinstance(description, str) else ""

    def fetch_listing(self, handle: RepositoryHandle, path: str = "") -> List[FileEntry]:
        """Return files in traversal order, descending at most ``max_depth`` levels."""
        payload = self._get(self._contents_url(handle, path))
        if not isinstance(payload, list):
            raise FetchError(f"Expected a directory listing at '{path or '/'}'")

        files: List[FileEntry] = []
        for item in payload:
            if not isinstance(item, dict):
                continue
            item_type = item.get("type")
            item_path = str(item.get("path", ""))
            item_name = str(item.get("name", ""))
            if item_type == "file":
                size = item.get("size")
                files.append(
                    FileEntry(
                        path=item_path,
                        name=item_name,
                        size=size if isinstance(size, int) else 0,
                    )
                )
            elif item_type == "dir" and item_name != ".git":
                if len(path.split("/")) < self.max_depth:
                    files.extend(self.fetch_listing(handle, item_path))
        return files

    def fetch_manifest(self, handle: RepositoryHandle, path: str) -> Optional[str]:
        """Return decoded file contents, or ``None`` when the file does not exist."""
        try:
            payload = self._get(self._contents_url(handle, path))
        except FetchError as exc:
            if exc.status == 404:
                return None
            raise
        if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
            raise FetchError(f"Unexpected content payload for {path}")
        try:
            raw = base64.b64decode(payload["content"])
        except ValueError as exc:
            raise FetchError(f"Could not decode {path}: {exc}") from exc
        return raw.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # Helpers

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "labspace-generator",
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    def _repo_url(self, handle: RepositoryHandle) -> str:
        return f"{self.api_url}/repos/{quote(handle.owner)}/{quote(handle.name)}"

    def _contents_url(self, handle: RepositoryHandle, path: str) -> str:
        return f"{self._repo_url(handle)}/contents/{quote(path)}"

    def _get(self, url: str) -> Any:
        logger.debug("GET %s", url)
        return self._transport(url, self._headers(), self.request_timeout)


def collect_manifests(
    fetcher: GitHubFetcher,
    handle: RepositoryHandle,
    listing: Sequence[FileEntry],
) -> Dict[str, str]:
    """Fetch every recognized top-level manifest; failures leave it absent."""
    present = {entry.path for entry in listing}
    manifests: Dict[str, str] = {}
    for name in RECOGNIZED_MANIFESTS:
        if name not in present:
            continue
        try:
            content = fetcher.fetch_manifest(handle, name)
        except FetchError as exc:
            logger.warning("Could not fetch %s: %s", name, exc)
            continue
        if content is not None:
            manifests[name] = content
    return manifests


__all__ = [
    "FetchError",
    "GitHubFetcher",
    "collect_manifests",
    "parse_repository_reference",
]
