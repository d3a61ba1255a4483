from .config import PromptConfig
from .errors import (
    ConfigInvalid,
    EmptyCatalog,
    ListingFailure,
    PromptError,
    SelectionInvalid,
)
from .s3 import ListingResult, S3Service
from .selection import SelectionResult
from .session import PromptSession

__all__ = [
    "ConfigInvalid",
    "EmptyCatalog",
    "ListingFailure",
    "ListingResult",
    "PromptConfig",
    "PromptError",
    "PromptSession",
    "S3Service",
    "SelectionInvalid",
    "SelectionResult",
]
