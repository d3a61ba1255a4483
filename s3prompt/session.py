from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .config import PromptConfig
from .dispatcher import DispatcherState, InputAction, InputDispatcher
from .errors import ListingFailure, PromptError, error_message
from .menu import MenuEntry, build_menu
from .navigation import SELECT_FOLDER, NavigationState, advance, initial_state
from .s3 import ListingResult, S3Service
from .selection import SelectionResult, is_terminal, resolve

logger = logging.getLogger(__name__)

ROOT_LABEL = "Buckets"
ARROW_HINT = "(Use arrow keys)"

Outcome = Union[SelectionResult, PromptError]


@dataclass(frozen=True)
class Snapshot:
    header_text: str
    current_path_text: str
    menu: tuple[MenuEntry, ...]
    selected_index: int
    is_loading: bool
    status: str
    answer_text: str = ""
    error_text: str = ""


class PromptSession:
    """One run of the browser prompt, from the first listing to a result.

    Combines the dispatcher, the navigation rules, the menu builder, the
    resolver and the listing gateway. ``on_change`` receives a fresh
    ``Snapshot`` after every change and ``on_complete`` receives the
    ``SelectionResult`` or the ``PromptError`` that ended the session.
    """

    def __init__(
        self,
        config: PromptConfig,
        service: Optional[S3Service] = None,
        on_change: Optional[Callable[[Snapshot], None]] = None,
    ) -> None:
        self.config = config
        self.service = service or S3Service(
            profile=config.profile, region=config.region
        )
        self.on_change = on_change
        self.state: NavigationState = initial_state(config)
        self.dispatcher = InputDispatcher()
        self.listing: Optional[ListingResult] = None
        self.result: Optional[SelectionResult] = None
        self.error: Optional[PromptError] = None
        self._on_complete: Optional[Callable[[Outcome], None]] = None
        self._fetch_token = 0
        self._stopped = False
        self._first_render = True

    @property
    def finished(self) -> bool:
        return self._stopped or self.dispatcher.is_finished

    async def start(
        self, on_complete: Optional[Callable[[Outcome], None]] = None
    ) -> None:
        self._on_complete = on_complete
        await self._refresh()

    def stop(self) -> None:
        self._stopped = True
        self._fetch_token += 1

    async def handle(self, action: InputAction) -> None:
        if self.finished:
            return
        self._first_render = False
        if action is InputAction.CURSOR_UP:
            self._move(-1)
        elif action is InputAction.CURSOR_DOWN:
            self._move(1)
        elif action is InputAction.SUBMIT:
            await self._submit()
        else:
            if self.dispatcher.key():
                self._changed()

    def _move(self, delta: int) -> None:
        if self.dispatcher.move(delta):
            self.state.selected_index = self.dispatcher.cursor
            self._changed()

    async def _submit(self) -> None:
        if self.dispatcher.state is not DispatcherState.READY:
            return
        entry = self.dispatcher.current_entry()
        if entry is None:
            return
        value = entry.value
        if is_terminal(value, self.state, self.listing, self.config):
            try:
                result = resolve(self.state, value)
            except PromptError as exc:
                self._fail(exc)
                return
            self._complete(result)
            return
        if not self._is_navigational(entry):
            logger.debug("Ignoring submit of %r", value)
            self._changed()
            return
        self.dispatcher.navigate()
        self.state = advance(self.state, value, self.config)
        await self._refresh()

    def _is_navigational(self, entry: MenuEntry) -> bool:
        if entry.is_separator:
            return False
        if self.listing is not None and self.listing.is_file(entry.value):
            return False
        if entry.value == SELECT_FOLDER:
            return False
        return True

    async def _refresh(self) -> None:
        self._fetch_token += 1
        token = self._fetch_token
        self._changed()
        bucket = self.state.bucket
        prefix = self.state.prefix
        try:
            listing = await self.service.fetch_listing(bucket, prefix)
        except PromptError as exc:
            if self._is_current(token):
                self._fail(exc)
            return
        except Exception as exc:
            if self._is_current(token):
                failure = ListingFailure(error_message(exc))
                failure.__cause__ = exc
                self._fail(failure)
            return
        if not self._is_current(token):
            logger.debug("Discarding stale listing for %r/%r", bucket, prefix)
            return
        self.listing = listing
        menu = build_menu(listing, self.state, self.config)
        if self.dispatcher.loaded(menu):
            self.state.selected_index = 0
        self._changed()

    def _is_current(self, token: int) -> bool:
        return token == self._fetch_token and not self.finished

    def _complete(self, result: SelectionResult) -> None:
        if not self.dispatcher.answer():
            return
        self.result = result
        logger.info("Selected %s", result.uri)
        self._changed()
        if self._on_complete is not None:
            self._on_complete(result)

    def _fail(self, exc: PromptError) -> None:
        if not self.dispatcher.fail():
            return
        self.error = exc
        logger.info("Prompt failed: %s", exc)
        self._changed()
        if self._on_complete is not None:
            self._on_complete(exc)

    def _changed(self) -> None:
        if self.on_change is not None:
            self.on_change(self.snapshot())

    def current_path_text(self) -> str:
        return f"{self.state.bucket or ROOT_LABEL}/{self.state.prefix or ''}"

    def snapshot(self) -> Snapshot:
        header = self.config.message
        if self._first_render:
            header = f"{header} {ARROW_HINT}"
        return Snapshot(
            header_text=header,
            current_path_text=self.current_path_text(),
            menu=tuple(self.dispatcher.menu),
            selected_index=self.dispatcher.menu_index(),
            is_loading=self.dispatcher.is_loading,
            status=self.dispatcher.state.value,
            answer_text=self.result.uri if self.result else "",
            error_text=str(self.error) if self.error else "",
        )
