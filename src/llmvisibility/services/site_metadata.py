"""Lightweight website metadata fetcher."""

import logging
import re
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Optional

import requests
from bs4 import BeautifulSoup

from ..core.constants import MetadataConstants

logger = logging.getLogger(__name__)

_DESCRIPTION_NAME_RE = re.compile(r"^description$", re.IGNORECASE)


def _read_page(url: str, timeout: float, deadline: float) -> Optional[bytes]:
    """Stream at most ``MAX_RESPONSE_BYTES`` of the page, giving up at ``deadline``."""
    response = requests.get(url, timeout=timeout, stream=True)
    try:
        if not response.ok:
            logger.warning(f"Metadata fetch failed for {url}: HTTP {response.status_code}")
            return None

        body = bytearray()
        for chunk in response.iter_content(chunk_size=MetadataConstants.CHUNK_SIZE):
            if time.monotonic() > deadline:
                logger.warning(f"Metadata fetch for {url} exceeded {timeout}s")
                return None
            body.extend(chunk)
            if len(body) >= MetadataConstants.MAX_RESPONSE_BYTES:
                break
        return bytes(body[:MetadataConstants.MAX_RESPONSE_BYTES])
    finally:
        response.close()


def parse_meta_description(html) -> Optional[str]:
    """Return the trimmed ``<meta name="description">`` content, if any."""
    soup = BeautifulSoup(html, "html.parser")
    tag = soup.find("meta", attrs={"name": _DESCRIPTION_NAME_RE})
    if not tag or not tag.get("content"):
        return None
    description = str(tag["content"]).strip()
    return description[:MetadataConstants.MAX_DESCRIPTION_LENGTH] or None


def fetch_meta_description(url: str, timeout: float = MetadataConstants.DEFAULT_TIMEOUT) -> Optional[str]:
    """Fetch ``<meta name="description">`` from a website.

    The whole fetch (connect, slow or oversized bodies included) is bounded by
    ``timeout`` seconds. Any failure (timeout, network error, non-2xx status,
    missing tag) returns None.
    """
    if not url:
        return None

    deadline = time.monotonic() + timeout
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = executor.submit(_read_page, url, timeout, deadline)
        body = future.result(timeout=timeout)
    except FutureTimeoutError:
        logger.warning(f"Metadata fetch for {url} timed out after {timeout}s")
        return None
    except requests.RequestException as e:
        logger.warning(f"Metadata fetch failed for {url}: {e}")
        return None
    finally:
        executor.shutdown(wait=False)

    if not body:
        return None
    return parse_meta_description(body)
