"""
Image fallback state machine

Each displayed image gets its own machine. It walks an ordered list of
candidate generators, one per attempt, until an image loads or the list is
exhausted, then settles on either "loaded" or "failed" (placeholder).

A generator takes (raw_url, refresh_token) and returns a candidate URL, or
None when it cannot produce one. None ends the sequence.
"""
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from constants import CARD_PLACEHOLDER, IMAGE_PLACEHOLDER
from records import AttemptStatus, ImageResolutionAttempt
from url_resolver import (
    direct_image_url,
    extract_drive_file_id,
    is_drive_url,
    proxied_url,
    thumbnail_url,
    with_cache_buster,
)

CandidateGenerator = Callable[[str, Any], Optional[str]]


class MachineState:
    LOADING = "loading"
    LOADED = "loaded"
    FAILED = "failed"


def proxied_candidate(raw_url: str, token) -> Optional[str]:
    return with_cache_buster(proxied_url(raw_url), token)


def thumbnail_candidate(raw_url: str, token) -> Optional[str]:
    """Drive thumbnail for Drive-hosted links; an id= query on any other host is not a Drive file"""
    if not is_drive_url(raw_url):
        return None
    file_id = extract_drive_file_id(raw_url)
    if not file_id:
        return None
    return with_cache_buster(thumbnail_url(file_id), token)


def direct_candidate(raw_url: str, token) -> Optional[str]:
    return with_cache_buster(direct_image_url(raw_url), token)


# Zoomable viewer: proxy first, then Drive thumbnail, then the direct URL
VIEWER_SEQUENCE = (proxied_candidate, thumbnail_candidate, direct_candidate)

# Catalog cards: direct URL, then the generic icon
CARD_SEQUENCE = (direct_candidate,)

SEQUENCES = {
    "viewer": (VIEWER_SEQUENCE, IMAGE_PLACEHOLDER),
    "card": (CARD_SEQUENCE, CARD_PLACEHOLDER),
}


class ImageFallbackMachine:
    """Per-image controller that settles on a working URL or a placeholder"""

    def __init__(
        self,
        source_url: str,
        refresh_token=0,
        sequence: Sequence[CandidateGenerator] = VIEWER_SEQUENCE,
        placeholder: str = IMAGE_PLACEHOLDER,
        on_error: Optional[Callable[[], None]] = None,
        logger=None,
    ):
        if not sequence:
            raise ValueError("A fallback sequence needs at least one candidate generator")
        self.sequence = tuple(sequence)
        self.placeholder = placeholder
        self.on_error_callback = on_error
        self.logger = logger or structlog.get_logger("image_fallback")
        self.source_url = source_url or ""
        self.refresh_token = refresh_token
        self._start()

    @classmethod
    def for_variant(cls, variant: str, source_url: str, refresh_token=0, **kwargs) -> "ImageFallbackMachine":
        if variant not in SEQUENCES:
            raise ValueError(f"Unknown image variant: {variant}")
        sequence, placeholder = SEQUENCES[variant]
        kwargs.setdefault("placeholder", placeholder)
        return cls(source_url, refresh_token, sequence=sequence, **kwargs)

    def _start(self):
        self.state = MachineState.LOADING
        self.attempt_index = 0
        self.current_url = None
        self.attempts: List[ImageResolutionAttempt] = []
        self._error_reported = False

        if not self.source_url:
            # Nothing to load, show the placeholder straight away
            self.state = MachineState.FAILED
            self.current_url = self.placeholder
            return

        if not self._try_attempt(0):
            self._fail(notify=True)

    def _try_attempt(self, index: int) -> bool:
        if index >= len(self.sequence):
            return False
        candidate = self.sequence[index](self.source_url, self.refresh_token)
        if not candidate:
            self.logger.debug("Fallback skipped, no candidate", source=self.source_url, attempt=index)
            return False
        self.attempt_index = index
        self.current_url = candidate
        self.attempts.append(ImageResolutionAttempt(self.source_url, index, candidate))
        self.logger.debug("Trying image candidate", source=self.source_url, attempt=index, url=candidate)
        return True

    def _fail(self, notify: bool):
        self.state = MachineState.FAILED
        self.current_url = self.placeholder
        if self.attempts:
            self.attempts[-1].status = AttemptStatus.FAILED_TERMINAL
        self.logger.info("All image fallbacks failed", source=self.source_url, attempts=len(self.attempts))
        if notify and not self._error_reported:
            self._error_reported = True
            if self.on_error_callback:
                self.on_error_callback()

    @property
    def is_terminal(self) -> bool:
        return self.state != MachineState.LOADING

    def on_load(self) -> str:
        """The current candidate rendered"""
        if self.is_terminal:
            return self.state
        self.state = MachineState.LOADED
        self.attempts[-1].status = AttemptStatus.LOADED
        return self.state

    def on_error(self) -> str:
        """The current candidate failed to render"""
        if self.is_terminal:
            return self.state
        self.attempts[-1].status = AttemptStatus.FAILED_RETRYING
        if not self._try_attempt(self.attempt_index + 1):
            self._fail(notify=True)
        return self.state

    def reset(self, source_url: Optional[str] = None, refresh_token=None):
        """Restart at attempt 0, optionally with a new source or token"""
        if source_url is not None:
            self.source_url = source_url
        if refresh_token is not None:
            self.refresh_token = refresh_token
        self._start()

    def update(self, source_url: str, refresh_token) -> bool:
        """Restart only when the source URL or refresh token changed"""
        if source_url == self.source_url and refresh_token == self.refresh_token:
            return False
        self.reset(source_url or "", refresh_token)
        return True

    def planned_candidates(self) -> List[str]:
        """Every candidate the sequence would try, in order"""
        planned = []
        if not self.source_url:
            return planned
        for generator in self.sequence:
            candidate = generator(self.source_url, self.refresh_token)
            if not candidate:
                break
            planned.append(candidate)
        return planned

    def describe(self) -> Dict[str, Any]:
        return {
            "sourceUrl": self.source_url,
            "refreshToken": self.refresh_token,
            "state": self.state,
            "attempt": self.attempt_index,
            "currentUrl": self.current_url,
            "placeholder": self.placeholder,
            "candidates": self.planned_candidates(),
            "attempts": [a.to_dict() for a in self.attempts],
        }
