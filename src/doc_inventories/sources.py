"""Obtaining inventory data from local files or URLs."""
from __future__ import annotations

import logging
import re
import time
from pathlib import Path

import requests

from .errors import InventoryArgumentError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1.0
DEFAULT_RETRIES = 3
DEFAULT_WAIT_TIME = 1.0

_RX_URL = re.compile(r"^https?://")


def is_url(source: str) -> bool:
    return _RX_URL.match(str(source)) is not None


def read_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
    wait_time: float = DEFAULT_WAIT_TIME,
) -> bytes:
    """Download ``url`` and return its content.

    Args:
        url: The URL to download.
        timeout: Seconds to wait for the server on each attempt.
        retries: Total number of attempts.
        wait_time: Each retry waits ``wait_time`` seconds longer than the
            previous one.

    Raises:
        requests.RequestException: The error of the last attempt, once all
            attempts have failed.
    """
    attempt = 0
    while True:
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            attempt += 1
            if attempt >= retries:
                logger.error("Failed to download %s after %d attempt(s): %s", url, attempt, e)
                raise
            delay = wait_time * attempt
            logger.warning(
                "Download of %s failed (attempt %d of %d), retrying in %.1fs: %s",
                url, attempt, retries, delay, e,
            )
            time.sleep(delay)


def read_source(
    source: str | Path,
    timeout: float = DEFAULT_TIMEOUT,
    retries: int = DEFAULT_RETRIES,
    wait_time: float = DEFAULT_WAIT_TIME,
) -> bytes:
    """Return the bytes of a local file or, for an ``http(s)://`` source, a URL."""
    if is_url(source):
        return read_url(str(source), timeout=timeout, retries=retries, wait_time=wait_time)
    return Path(source).read_bytes()


def split_url(url: str) -> tuple[str, str]:
    """Split a URL into a root URL and a filename at the last slash.

    Example:
        >>> split_url("https://docs.python.org/3/objects.inv")
        ('https://docs.python.org/3/', 'objects.inv')

    Raises:
        InventoryArgumentError: If ``url`` does not start with ``http://`` or
            ``https://``.
    """
    m = _RX_URL.match(url)
    if m is None:
        raise InventoryArgumentError(f"Url {url!r} must start with 'http://' or 'https://'")
    offset = m.end()
    last_slash = url.rfind("/", offset)
    if last_slash < 0:
        return url, ""
    return url[: last_slash + 1], url[last_slash + 1 :]


def root_url(source: str | Path, warn: bool = True) -> str:
    """Return the root URL for an inventory source.

    For a URL, this is the part up to and including the last slash. For a
    local file, there is no root URL and an empty string is returned (with
    a warning, unless ``warn=False``).
    """
    source = str(source)
    if is_url(source):
        return split_url(source)[0]
    if warn:
        logger.warning("Empty root url with source=%r.", source)
    return ""
