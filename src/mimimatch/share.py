"""Sharing the shortlist.

A share target is optional. Without one the text is copied to the
clipboard instead.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum
from typing import Protocol

logger = logging.getLogger(__name__)

SHARE_TITLE = "Moje oblíbená jména"


class ShareError(RuntimeError):
    """Raised by a share target when sharing fails."""


class ShareCancelled(ShareError):
    """Raised by a share target when the user dismisses the share dialog."""


class ShareTarget(Protocol):
    """External share integration."""

    def share(self, title: str, text: str) -> None: ...


class ShareOutcome(StrEnum):
    SHARED = "shared"
    COPIED = "copied"
    CANCELLED = "cancelled"
    FAILED = "failed"


def share_shortlist(
    text: str,
    *,
    target: ShareTarget | None,
    copy: Callable[[str], None],
    title: str = SHARE_TITLE,
) -> ShareOutcome:
    """Share text through target, or copy it when no target is available.

    Cancellation is silent. Other share failures are logged.
    """
    if target is None:
        logger.debug("No share target available, copying to clipboard")
        copy(text)
        return ShareOutcome.COPIED

    try:
        target.share(title, text)
    except ShareCancelled:
        return ShareOutcome.CANCELLED
    except ShareError as e:
        logger.error("Sharing failed: %s", e)
        return ShareOutcome.FAILED
    return ShareOutcome.SHARED
