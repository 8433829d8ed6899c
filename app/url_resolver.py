"""
Google Drive share link resolution

Turns the links business owners paste into their sheets into URLs an <img>
tag can actually render. Every function here is pure.
"""
import re
from typing import Optional
from urllib.parse import quote, urlparse, parse_qs

from constants import (
    DRIVE_HOST,
    DRIVE_THUMBNAIL_URL,
    DRIVE_THUMBNAIL_SIZE,
    DRIVE_UC_VIEW_URL,
    IMAGE_PROXY_PATH,
)

# Tried in order, first match wins
_DRIVE_ID_PATTERNS = [
    re.compile(r"/file/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"/d/([a-zA-Z0-9_-]+)"),
    re.compile(r"[?&]id=([a-zA-Z0-9_-]+)"),
]


def is_drive_url(url: str) -> bool:
    return bool(url) and DRIVE_HOST in url


def extract_drive_file_id(url: str) -> Optional[str]:
    """File id from /file/d/<id>, /d/<id> or ?id=<id> forms, else None"""
    if not url:
        return None
    for pattern in _DRIVE_ID_PATTERNS:
        match = pattern.search(url)
        if match and match.group(1):
            return match.group(1)
    return None


def _split_file_id(url: str) -> Optional[str]:
    # Share links: /file/d/<id>/view, then bare id=<id>
    if "/file/d/" in url:
        file_id = re.split(r"[/?#]", url.split("/file/d/", 1)[1], 1)[0]
    elif "id=" in url:
        file_id = url.split("id=", 1)[1].split("&", 1)[0]
    else:
        return None
    return file_id or None


def thumbnail_url(file_id: str, size: str = DRIVE_THUMBNAIL_SIZE) -> str:
    return DRIVE_THUMBNAIL_URL.format(file_id=file_id, size=size)


def uc_view_url(file_id: str) -> str:
    return DRIVE_UC_VIEW_URL.format(file_id=file_id)


def direct_image_url(raw: str) -> str:
    """
    Direct image URL for a raw link.

    Drive links with an extractable id become thumbnail-service URLs, which
    embed more reliably than the "view" form. Anything else passes through.
    """
    if not raw:
        return ""
    if is_drive_url(raw):
        file_id = _split_file_id(raw)
        if file_id:
            return thumbnail_url(file_id)
    return raw


def proxied_url(raw: str) -> str:
    """Same-origin proxy URL wrapping the canonical uc?export=view form"""
    if not raw:
        return ""
    target = raw
    if is_drive_url(raw):
        file_id = extract_drive_file_id(raw)
        if file_id:
            target = uc_view_url(file_id)
    return f"{IMAGE_PROXY_PATH}?url={quote(target, safe='')}"


def unwrap_proxied_url(url: str) -> str:
    """Upstream URL carried by a proxy URL; other URLs are returned as-is"""
    if not url or not url.startswith(IMAGE_PROXY_PATH):
        return url
    values = parse_qs(urlparse(url).query).get("url")
    return values[0] if values else url


def with_cache_buster(url: str, token) -> str:
    """Append t=<token> so the browser bypasses its HTTP cache"""
    if not url:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}t={token}"
