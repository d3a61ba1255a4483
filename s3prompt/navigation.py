from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from .config import PromptConfig

logger = logging.getLogger(__name__)

GO_UP = "Up a Level"
SELECT_FOLDER = "Select Current Folder"


@dataclass
class NavigationState:
    bucket: Optional[str] = None
    prefix: Optional[str] = None
    depth: int = 0
    selected_index: int = 0


def prefix_depth(prefix: Optional[str]) -> int:
    if not prefix:
        return 0
    return len([part for part in prefix.split("/") if part])


def initial_state(config: PromptConfig) -> NavigationState:
    if not config.bucket:
        return NavigationState()
    return NavigationState(
        bucket=config.bucket,
        prefix=config.prefix,
        depth=1 + prefix_depth(config.prefix),
    )


def parent_prefix(prefix: Optional[str]) -> Optional[str]:
    """Return the prefix one folder above ``prefix``, or ``None`` at the root.

    ``"a/b/"`` gives ``"a/"`` and ``"a/"`` gives ``None``. Segments such as
    ``"."`` are plain key text in S3 and are not collapsed.
    """
    if not prefix:
        return None
    trimmed = prefix.rstrip("/")
    if "/" not in trimmed:
        return None
    parent = trimmed.rsplit("/", 1)[0]
    if not parent:
        return None
    return f"{parent}/"


def advance(
    state: NavigationState, value: str, config: PromptConfig
) -> NavigationState:
    """Compute the state reached by submitting a navigational ``value``.

    The caller decides that ``value`` is navigational; this never resolves a
    selection. ``depth`` counts the bucket pick plus each folder descent.
    """
    bucket = state.bucket
    prefix = state.prefix
    if value == GO_UP:
        depth = max(state.depth - 1, 0)
        if depth > 0:
            prefix = parent_prefix(prefix)
    elif value == SELECT_FOLDER:
        depth = state.depth
    elif not bucket:
        bucket = value
        depth = state.depth + 1
    else:
        prefix = value
        depth = state.depth + 1

    if depth == 0:
        prefix = None
        if config.allow_bucket_switch:
            bucket = None

    next_state = replace(
        state, bucket=bucket, prefix=prefix, depth=depth, selected_index=0
    )
    logger.debug(
        "Navigated %r: bucket=%r prefix=%r depth=%d",
        value,
        next_state.bucket,
        next_state.prefix,
        next_state.depth,
    )
    return next_state
