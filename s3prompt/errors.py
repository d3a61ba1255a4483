from __future__ import annotations

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class PromptError(Exception):
    """Base class for errors that end a prompt session."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or UNKNOWN_ERROR_MESSAGE)

    @property
    def message(self) -> str:
        return str(self)


class EmptyCatalog(PromptError):
    pass


class ListingFailure(PromptError):
    pass


class ConfigInvalid(PromptError):
    pass


class SelectionInvalid(PromptError):
    pass


def error_message(exc: BaseException) -> str:
    text = str(exc).strip()
    return text or UNKNOWN_ERROR_MESSAGE
