"""Cookie channel backed by an httpx cookie jar persisted in Netscape format.

Cookies are session cookies (no expiry). The jar is re-read from disk before
every access so that writes from other processes become visible to pollers.
"""

from __future__ import annotations

import logging
import os
from http.cookiejar import LoadError, MozillaCookieJar
from pathlib import Path

import httpx

from orgpilot.constants import DEFAULT_COOKIE_DOMAIN
from orgpilot.storage.base import StorageUnavailableError

logger = logging.getLogger(__name__)


class CookieStore:
    """Authoritative view-mode channel."""

    def __init__(self, path: Path, domain: str = DEFAULT_COOKIE_DOMAIN, name: str = "cookie") -> None:
        self.path = path.expanduser()
        self.domain = domain
        self.name = name
        self._jar = MozillaCookieJar(str(self.path))
        self.cookies = httpx.Cookies(self._jar)

    def _reload(self) -> None:
        self._jar.clear()
        if not self.path.exists():
            return
        try:
            self._jar.load(ignore_discard=True, ignore_expires=True)
        except (LoadError, OSError) as e:
            raise StorageUnavailableError(self.name, str(e)) from e

    def get(self, key: str) -> str | None:
        self._reload()
        try:
            return self.cookies.get(key, domain=self.domain)
        except httpx.CookieConflict as e:
            raise StorageUnavailableError(self.name, str(e)) from e

    def set(self, key: str, value: str) -> None:
        self._reload()
        self.cookies.set(key, value, domain=self.domain, path="/")
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._jar.save(str(tmp_path), ignore_discard=True, ignore_expires=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise StorageUnavailableError(self.name, str(e)) from e
        logger.debug("Set cookie %s=%s in %s", key, value, self.path)
