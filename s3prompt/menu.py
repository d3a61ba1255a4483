from __future__ import annotations

from dataclasses import dataclass

from .config import PromptConfig
from .navigation import GO_UP, SELECT_FOLDER, NavigationState
from .s3 import ListingResult

KIND_FILE = "file"
KIND_FOLDER = "folder"
KIND_BUCKET = "bucket"
KIND_SEPARATOR = "separator"
KIND_GO_UP = "go_up"
KIND_SELECT_FOLDER = "select_folder"

SEPARATOR_LINE = "──────────────"


@dataclass(frozen=True)
class MenuEntry:
    value: str
    kind: str
    label: str = ""

    @property
    def is_separator(self) -> bool:
        return self.kind == KIND_SEPARATOR

    @property
    def display(self) -> str:
        return self.label or self.value


SEPARATOR = MenuEntry(value="", kind=KIND_SEPARATOR, label=SEPARATOR_LINE)
GO_UP_ENTRY = MenuEntry(value=GO_UP, kind=KIND_GO_UP)
SELECT_FOLDER_ENTRY = MenuEntry(value=SELECT_FOLDER, kind=KIND_SELECT_FOLDER)


def display_segment(full_prefix: str, parent_prefix: str) -> str:
    name = full_prefix[len(parent_prefix) :] if parent_prefix else full_prefix
    if full_prefix.endswith("/"):
        return f"{name.strip('/')}/"
    return name


def entry_for(value: str, listing: ListingResult, prefix: str) -> MenuEntry:
    if listing.is_folder(value):
        return MenuEntry(
            value=value, kind=KIND_FOLDER, label=display_segment(value, prefix)
        )
    if listing.is_file(value):
        return MenuEntry(
            value=value, kind=KIND_FILE, label=display_segment(value, prefix)
        )
    return MenuEntry(value=value, kind=KIND_BUCKET, label=value)


def build_menu(
    listing: ListingResult, state: NavigationState, config: PromptConfig
) -> list[MenuEntry]:
    """Entries, then a separator, the navigation entries and a closing separator.

    Cursor positions count only non-separator entries, so the order here is
    relied on by the dispatcher and must stay fixed.
    """
    prefix = state.prefix or ""
    menu = [entry_for(value, listing, prefix) for value in listing.entries]
    menu.append(SEPARATOR)
    if state.depth > 0:
        menu.append(GO_UP_ENTRY)
    if config.allow_folder_select:
        menu.append(SELECT_FOLDER_ENTRY)
    menu.append(SEPARATOR)
    return menu


def selectable_entries(menu: list[MenuEntry]) -> list[MenuEntry]:
    return [entry for entry in menu if not entry.is_separator]
