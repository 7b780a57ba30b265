from __future__ import annotations

from pathlib import Path

import requests


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUT = 30.0


def is_url(source: str) -> bool:
    return source.strip().lower().startswith(("http://", "https://"))


def read_source(source: str, timeout: float = DEFAULT_TIMEOUT) -> bytes:
    """
    Load workbook bytes from a local path or an http(s) URL.

    Raises requests.RequestException for network / HTTP errors and
    OSError for unreadable files.
    """
    if is_url(source):
        resp = requests.get(source.strip(), timeout=timeout)
        resp.raise_for_status()
        return resp.content

    return Path(source).expanduser().read_bytes()
