"""Remote version check against the Packagist feed, with an on-disk cache.

The cache is two files in the system temp directory: the last good response
body and its ``Last-Modified`` value. A body younger than the TTL is returned
without touching the network. Past the TTL the feed is revalidated with
``If-Modified-Since``; a 304 only refreshes the body's mtime.

Version checking is advisory. Nothing in this module raises to its caller:
network errors, bad statuses and unparsable payloads all degrade to the last
cached body or to ``None``.
"""

from __future__ import annotations

import json
import logging
import ssl
import tempfile
import time
from pathlib import Path
from typing import Callable, Optional, Protocol

import httpx
import truststore
from packaging.version import InvalidVersion, Version

from laravel_installer.core.constants import (
    INSTALLER_PACKAGE,
    USER_AGENT,
    VERSION_CACHE_FILE,
    VERSION_CACHE_TTL_SECONDS,
    VERSION_FEED_URL,
    VERSION_FETCH_TIMEOUT_SECONDS,
    VERSION_TOKEN_FILE,
)
from laravel_installer.core.errors import RemoteFetchFailure

__all__ = [
    "CacheStore",
    "FileCacheStore",
    "MemoryCacheStore",
    "VersionChecker",
    "parse_latest_version",
]

logger = logging.getLogger(__name__)

ssl_context = truststore.SSLContext(ssl.PROTOCOL_TLS_CLIENT)


class CacheStore(Protocol):
    """Storage for the cached feed body and its revalidation token."""

    def read_payload(self) -> Optional[bytes]: ...

    def write_payload(self, body: bytes) -> None: ...

    def read_token(self) -> Optional[str]: ...

    def write_token(self, token: str) -> None: ...

    def touch(self) -> None: ...

    def payload_mtime(self) -> Optional[float]: ...


class FileCacheStore:
    """Cache files under the system temp directory.

    No locking is done; concurrent runs may race, and readers simply use
    whatever bytes are present.
    """

    def __init__(self, directory: Path | str | None = None):
        root = Path(directory) if directory is not None else Path(tempfile.gettempdir())
        self.payload_path = root / VERSION_CACHE_FILE
        self.token_path = root / VERSION_TOKEN_FILE

    def read_payload(self) -> Optional[bytes]:
        try:
            return self.payload_path.read_bytes()
        except FileNotFoundError:
            return None

    def write_payload(self, body: bytes) -> None:
        self.payload_path.write_bytes(body)

    def read_token(self) -> Optional[str]:
        try:
            raw = self.token_path.read_bytes()
        except FileNotFoundError:
            return None
        return raw.decode("utf-8", errors="replace").strip() or None

    def write_token(self, token: str) -> None:
        self.token_path.write_text(token, encoding="utf-8")

    def touch(self) -> None:
        self.payload_path.touch()

    def payload_mtime(self) -> Optional[float]:
        try:
            return self.payload_path.stat().st_mtime
        except FileNotFoundError:
            return None


class MemoryCacheStore:
    """In-process cache store, mainly for tests."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self.payload: Optional[bytes] = None
        self.token: Optional[str] = None
        self.mtime: Optional[float] = None

    def read_payload(self) -> Optional[bytes]:
        return self.payload

    def write_payload(self, body: bytes) -> None:
        self.payload = body
        self.mtime = self._clock()

    def read_token(self) -> Optional[str]:
        return self.token

    def write_token(self, token: str) -> None:
        self.token = token

    def touch(self) -> None:
        if self.payload is not None:
            self.mtime = self._clock()

    def payload_mtime(self) -> Optional[float]:
        return self.mtime if self.payload is not None else None


def parse_latest_version(payload: str, package: str = INSTALLER_PACKAGE) -> Optional[str]:
    """Return the newest version listed for ``package`` in a Packagist p2 document."""
    try:
        data = json.loads(payload)
        version = data["packages"][package][0]["version"]
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise RemoteFetchFailure(f"Unexpected version feed payload: {exc}") from exc
    if not isinstance(version, str):
        raise RemoteFetchFailure(f"Unexpected version value: {version!r}")
    return version.lstrip("v") or None


class VersionChecker:
    """Fetches the latest published installer version."""

    def __init__(
        self,
        store: CacheStore | None = None,
        client: httpx.Client | None = None,
        *,
        clock: Callable[[], float] = time.time,
        url: str = VERSION_FEED_URL,
        ttl: float = VERSION_CACHE_TTL_SECONDS,
        timeout: float = VERSION_FETCH_TIMEOUT_SECONDS,
    ):
        self.store = store if store is not None else FileCacheStore()
        self.client = client
        self.clock = clock
        self.url = url
        self.ttl = ttl
        self.timeout = timeout

    def _cached(self) -> Optional[str]:
        try:
            body = self.store.read_payload()
        except OSError as exc:
            logger.warning("Unable to read version cache: %s", exc)
            return None
        return None if body is None else body.decode("utf-8", errors="replace")

    def _get(self, headers: dict[str, str]) -> httpx.Response:
        if self.client is not None:
            return self.client.get(self.url, headers=headers, timeout=self.timeout, follow_redirects=True)
        with httpx.Client(verify=ssl_context) as client:
            return client.get(self.url, headers=headers, timeout=self.timeout, follow_redirects=True)

    def fetch_version_data(self) -> Optional[str]:
        """Return the feed body, from cache when fresh, else revalidated."""
        try:
            mtime = self.store.payload_mtime()
        except OSError:
            mtime = None
        if mtime is not None and mtime > self.clock() - self.ttl:
            logger.debug("Version cache hit (age %.0fs)", self.clock() - mtime)
            return self._cached()

        headers = {"User-Agent": USER_AGENT}
        try:
            token = self.store.read_token()
        except OSError:
            token = None
        if token and token.isascii():
            headers["If-Modified-Since"] = token
        elif token:
            logger.debug("Ignoring unusable cache token %r", token)

        try:
            response = self._get(headers)
        except (httpx.HTTPError, UnicodeError, ValueError) as exc:
            logger.warning("Version feed request failed: %s", exc)
            return self._cached()

        logger.debug("Version feed responded %s", response.status_code)
        try:
            if response.status_code == 304:
                cached = self._cached()
                if cached is not None:
                    self.store.touch()
                    return cached
            elif response.status_code == 200:
                body = response.content
                self.store.write_payload(body)
                last_modified = response.headers.get("Last-Modified")
                if last_modified:
                    self.store.write_token(last_modified.strip())
                return body.decode("utf-8", errors="replace")
            else:
                logger.warning("Unexpected version feed status %s", response.status_code)
        except OSError as exc:
            logger.warning("Unable to update version cache: %s", exc)
            if response.status_code == 200:
                return response.content.decode("utf-8", errors="replace")

        return self._cached()

    def latest_version(self) -> Optional[str]:
        """Return the newest published version, or ``None`` when unknown."""
        data = self.fetch_version_data()
        if not data:
            return None
        try:
            return parse_latest_version(data)
        except RemoteFetchFailure as exc:
            logger.warning("Failed to fetch latest version: %s", exc)
            return None

    def newer_version(self, current: str) -> Optional[str]:
        """Return the latest version only when it is strictly newer than ``current``."""
        latest = self.latest_version()
        if not latest:
            return None
        try:
            if Version(latest) > Version(current):
                return latest
        except InvalidVersion as exc:
            logger.warning("Cannot compare versions %r and %r: %s", current, latest, exc)
        return None
