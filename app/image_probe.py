"""
Server-side image probing

Drives an ImageFallbackMachine against the network, the way a browser would
drive it with load/error events, to find which candidate actually renders.
"""
import logging

import requests

from image_fallback import ImageFallbackMachine
from url_resolver import unwrap_proxied_url

logger = logging.getLogger("main")


def candidate_renders(url: str, session=None, timeout: int = 10) -> bool:
    """True when the URL answers 2xx with something other than an HTML page"""
    http = session or requests
    target = unwrap_proxied_url(url)
    if not target or not target.startswith(("http://", "https://")):
        return False
    try:
        response = http.get(target, stream=True, timeout=timeout, allow_redirects=True)
    except requests.exceptions.RequestException as e:
        logger.debug(f"Probe failed for {target}: {e}")
        return False
    try:
        if not response.ok:
            return False
        # Drive answers blocked files with a 200 HTML interstitial
        content_type = (response.headers.get("Content-Type") or "").lower()
        return "text/html" not in content_type
    finally:
        response.close()


def probe_image(machine: ImageFallbackMachine, session=None, timeout: int = 10) -> ImageFallbackMachine:
    """Feed load/error events until the machine is terminal"""
    while not machine.is_terminal:
        if candidate_renders(machine.current_url, session=session, timeout=timeout):
            machine.on_load()
        else:
            machine.on_error()
    logger.info(f"Probe for {machine.source_url} settled on {machine.state}: {machine.current_url}")
    return machine
