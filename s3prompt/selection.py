from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .config import PromptConfig
from .errors import SelectionInvalid
from .navigation import SELECT_FOLDER, NavigationState
from .s3 import ListingResult

S3_HOST = "s3.amazonaws.com"
S3_SCHEME = "s3"


@dataclass(frozen=True)
class SelectionResult:
    bucket: str
    relative_path: str
    object_url: str
    uri: str

    def as_dict(self) -> dict[str, str]:
        return {
            "bucket": self.bucket,
            "prefix": self.relative_path,
            "objectUrl": self.object_url,
            "s3Uri": self.uri,
        }


def object_url(bucket: str, relative_path: str) -> str:
    return f"https://{S3_HOST}/{bucket}/{relative_path}"


def s3_uri(bucket: str, relative_path: str) -> str:
    return f"{S3_SCHEME}://{bucket}/{relative_path}"


def is_terminal(
    value: str,
    state: NavigationState,
    listing: Optional[ListingResult],
    config: PromptConfig,
) -> bool:
    if value == SELECT_FOLDER:
        return bool(state.bucket)
    if listing is None or not config.allow_object_select:
        return False
    return listing.is_file(value)


def relative_path_for(state: NavigationState, value: str) -> str:
    prefix = state.prefix or ""
    if value == SELECT_FOLDER:
        return prefix.strip("/")
    key = value.lstrip("/")
    if prefix and not key.startswith(prefix):
        key = f"{prefix}{key}"
    return key


def resolve(state: NavigationState, value: str) -> SelectionResult:
    """Build the result for a terminal ``value`` chosen in ``state``."""
    if not state.bucket:
        raise SelectionInvalid(
            f"Cannot resolve {value!r} without a bucket; pick a bucket first."
        )
    path = relative_path_for(state, value)
    return SelectionResult(
        bucket=state.bucket,
        relative_path=path,
        object_url=object_url(state.bucket, path),
        uri=s3_uri(state.bucket, path),
    )
