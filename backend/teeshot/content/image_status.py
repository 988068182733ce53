"""Per-prompt image generation status.

Image prompts found in parsed content are the join key between the parsed
segments and asynchronously generated images. Two textually identical
prompts share one status entry, so marking one ready resolves every card
that carries it.

Pydantic v2. Extra fields are forbidden to prevent drift.
"""

from __future__ import annotations

import itertools
from enum import Enum
from typing import Dict, Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from .cleaning import normalize_prompt


class ImageState(str, Enum):
    idle = "idle"
    pending = "pending"
    ready = "ready"
    failed = "failed"


class ImageStatus(BaseModel):
    """Generation/upload state of one image prompt."""

    model_config = ConfigDict(extra="forbid")

    state: ImageState = Field(default=ImageState.idle)
    local_url: Optional[str] = Field(default=None, description="Immediately displayable URL (data: URL)")
    remote_url: Optional[str] = Field(default=None, description="Durable URL; only this one is exportable")
    error: Optional[str] = Field(default=None, description="Failure reason when state is failed")
    token: int = Field(default=0, ge=0, description="Generation token of the request that owns this entry")


IDLE = ImageStatus()


class ImageStatusMap:
    """Explicit prompt -> ImageStatus map.

    Every `mark_pending` call hands out a new token. Results reported with a
    token that no longer owns the entry are discarded, so a slow request that
    was superseded by a retry cannot overwrite the newer state.

    Usage:
        statuses = ImageStatusMap()
        token = statuses.mark_pending(prompt)
        statuses.mark_ready(prompt, local_url, remote_url, token=token)
    """

    def __init__(self, entries: Optional[Dict[str, ImageStatus]] = None):
        self._entries: Dict[str, ImageStatus] = {}
        self._tokens = itertools.count(1)
        for prompt, status in (entries or {}).items():
            self._entries[normalize_prompt(prompt)] = status

    def get(self, prompt: str) -> ImageStatus:
        """Return the status for `prompt`; absent prompts are idle."""
        return self._entries.get(normalize_prompt(prompt), IDLE)

    def is_ready(self, prompt: str) -> bool:
        return self.get(prompt).state is ImageState.ready

    def mark_pending(self, prompt: str) -> int:
        """Mark `prompt` pending and return the token owning the new request."""
        token = next(self._tokens)
        self._entries[normalize_prompt(prompt)] = ImageStatus(state=ImageState.pending, token=token)
        return token

    def mark_ready(
        self,
        prompt: str,
        local_url: str,
        remote_url: Optional[str] = None,
        token: Optional[int] = None,
    ) -> bool:
        """Record a finished image.

        Returns:
            False if the result was stale and discarded, True otherwise.
        """
        key = normalize_prompt(prompt)
        if self._is_stale(key, token):
            return False
        self._entries[key] = ImageStatus(
            state=ImageState.ready,
            local_url=local_url,
            remote_url=remote_url,
            token=token or 0,
        )
        return True

    def mark_failed(self, prompt: str, reason: str, token: Optional[int] = None) -> bool:
        """Record a failed generation. Returns False if the result was stale."""
        key = normalize_prompt(prompt)
        if self._is_stale(key, token):
            return False
        self._entries[key] = ImageStatus(state=ImageState.failed, error=reason, token=token or 0)
        return True

    def _is_stale(self, key: str, token: Optional[int]) -> bool:
        if token is None:
            return False
        current = self._entries.get(key)
        return current is not None and current.token != token

    def snapshot(self, prompts: Optional[Iterable[str]] = None) -> Dict[str, ImageStatus]:
        """Copy of the map, optionally restricted (and ordered) to `prompts`."""
        if prompts is None:
            return dict(self._entries)
        return {normalize_prompt(p): self.get(p) for p in prompts}

    def __contains__(self, prompt: str) -> bool:
        return normalize_prompt(prompt) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
