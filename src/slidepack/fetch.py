"""Blocking HTTP fetches for URL-backed images and web pages."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import requests

from .errors import ErrorKind, PackageError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "slidepack/0.1 (+https://pypi.org/project/slidepack/)"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class HttpOptions:
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


def fetch(url: str, options: HttpOptions = HttpOptions()) -> requests.Response:
    """GET *url* once; any network or HTTP status failure becomes an ``io`` error."""
    logger.debug(f"Fetching {url}")
    try:
        response = requests.get(url, headers={"User-Agent": options.user_agent}, timeout=options.timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise PackageError(ErrorKind.IO, f"failed to fetch {url}: {e}") from e
    return response


def fetch_bytes(url: str, options: HttpOptions = HttpOptions()) -> bytes:
    return fetch(url, options).content
