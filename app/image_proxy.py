"""
Image proxy

Fetches an image server-side so the browser only ever talks to our own
origin. Pure pass-through: no caching, no auth, no rate limiting.
"""
import logging
from typing import Iterator, Optional, Tuple
from urllib.parse import unquote, urlparse

import requests

from constants import PROXY_CHUNK_SIZE
from exceptions import ProxyTransportError, ProxyUpstreamError, ValidationError

logger = logging.getLogger("main")

_ALLOWED_SCHEMES = ("http", "https")


def decode_target_url(value: Optional[str]) -> str:
    """
    Absolute http(s) URL from the ?url= parameter.

    The query string is already decoded once by the framework; clients that
    encoded twice get a second pass.
    """
    if not value or not value.strip():
        raise ValidationError("Missing image URL")
    url = value.strip()
    if "://" not in url:
        url = unquote(url)
    parsed = urlparse(url)
    if parsed.scheme not in _ALLOWED_SCHEMES or not parsed.netloc:
        raise ValidationError(f"Unsupported image URL: {url[:200]}")
    return url


def open_upstream(url: str, session=None, timeout: int = 20) -> requests.Response:
    """Streaming GET of the upstream image; raises on any failure"""
    http = session or requests
    logger.info(f"[ImageProxy] Attempting to fetch: {url}")
    try:
        response = http.get(url, stream=True, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        logger.error(f"[ImageProxy] Error proxying image {url}: {e}")
        raise ProxyTransportError(f"Error proxying image: {e}") from e

    logger.debug(f"[ImageProxy] Upstream status for {url}: {response.status_code}")
    if not response.ok:
        try:
            body_preview = response.text[:200]
        except Exception:
            body_preview = ""
        finally:
            response.close()
        logger.error(
            f"[ImageProxy] Failed to fetch image {url}. Status: {response.status_code} {response.reason}. "
            f"Body: {body_preview}"
        )
        raise ProxyUpstreamError(f"Failed to fetch image: {response.reason}", response.status_code)
    return response


def stream_body(response: requests.Response, chunk_size: int = PROXY_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield the upstream body, closing the connection when done"""
    try:
        for chunk in response.iter_content(chunk_size=chunk_size):
            if chunk:
                yield chunk
    finally:
        response.close()


def proxy_image(raw_url: Optional[str], session=None, timeout: int = 20) -> Tuple[Iterator[bytes], Optional[str]]:
    """(body chunks, upstream content type) for a ?url= value"""
    url = decode_target_url(raw_url)
    response = open_upstream(url, session=session, timeout=timeout)
    content_type = response.headers.get("Content-Type")
    if not content_type:
        logger.warning(f"[ImageProxy] No content-type header from upstream for {url}")
    return stream_body(response), content_type
