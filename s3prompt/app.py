from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.widgets import Footer, Header, Static

from .config import PromptConfig, load_config_file
from .dispatcher import InputAction
from .errors import ConfigInvalid, PromptError
from .menu import KIND_FOLDER, MenuEntry
from .s3 import S3Service
from .selection import SelectionResult
from .session import PromptSession, Snapshot

logger = logging.getLogger(__name__)

POINTER = "❯"
KEY_ACTIONS = {
    "up": InputAction.CURSOR_UP,
    "down": InputAction.CURSOR_DOWN,
    "enter": InputAction.SUBMIT,
}
CANCEL_KEYS = {"escape", "ctrl+c"}
OUTPUT_FORMATS = ("json", "uri", "url")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130


def paginate(
    lines: list[Text], selected: int, page_size: int
) -> list[Text]:
    if page_size <= 0 or len(lines) <= page_size:
        return lines
    start = selected - page_size // 2
    start = max(0, min(start, len(lines) - page_size))
    return lines[start : start + page_size]


def menu_line(entry: MenuEntry, is_selected: bool) -> Text:
    if entry.is_separator:
        return Text(f"  {entry.display}", style="dim")
    style = "bold" if entry.kind == KIND_FOLDER else ""
    if is_selected:
        return Text(f"{POINTER} {entry.display}", style="cyan")
    return Text(f"  {entry.display}", style=style)


def render_menu(snapshot: Snapshot, page_size: int) -> Text:
    lines = [
        menu_line(entry, index == snapshot.selected_index)
        for index, entry in enumerate(snapshot.menu)
    ]
    window = paginate(lines, snapshot.selected_index, page_size)
    return Text("\n").join(window)


def format_result(result: SelectionResult, output_format: str = "json") -> str:
    if output_format == "uri":
        return result.uri
    if output_format == "url":
        return result.object_url
    return json.dumps(result.as_dict(), indent=2)


class S3Prompt(App[Optional[SelectionResult]]):
    TITLE = "S3 Prompt"

    CSS = """
    #prompt-message {
        height: auto;
        padding: 0 1;
        text-style: bold;
    }

    #prompt-path {
        height: auto;
        padding: 0 1;
        color: $text;
    }

    #prompt-menu {
        height: auto;
        padding: 0 1;
        border: round $panel;
    }

    #prompt-status {
        height: 1;
        padding: 0 1;
        color: $text-muted;
    }
    """

    BINDINGS = [
        ("escape", "cancel", "Cancel"),
        ("ctrl+c", "cancel", "Cancel"),
    ]

    def __init__(
        self, config: PromptConfig, service: Optional[S3Service] = None
    ) -> None:
        super().__init__()
        self.config = config
        self.session = PromptSession(
            config, service=service, on_change=self._show_snapshot
        )
        self.error: Optional[PromptError] = None
        self.cancelled = False
        self._mounted = False

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="prompt-message")
        yield Static("", id="prompt-path")
        yield Static("", id="prompt-menu")
        yield Static("", id="prompt-status")
        yield Footer()

    async def on_mount(self) -> None:
        self.prompt_message = self.query_one("#prompt-message", Static)
        self.prompt_path = self.query_one("#prompt-path", Static)
        self.prompt_menu = self.query_one("#prompt-menu", Static)
        self.prompt_status = self.query_one("#prompt-status", Static)
        self._mounted = True
        self._show_snapshot(self.session.snapshot())
        self.run_worker(self.session.start(self._on_complete))

    def on_unmount(self) -> None:
        self.session.stop()

    def on_key(self, event: events.Key) -> None:
        if event.key in CANCEL_KEYS:
            return
        if self.session.finished:
            return
        action = KEY_ACTIONS.get(event.key, InputAction.OTHER_KEY)
        self.run_worker(self.session.handle(action))
        event.stop()

    def action_cancel(self) -> None:
        if self.session.finished:
            return
        self.cancelled = True
        self.session.stop()
        self.exit(None)

    def _show_snapshot(self, snapshot: Snapshot) -> None:
        if not self._mounted:
            return
        self.prompt_message.update(Text(snapshot.header_text))
        path = Text("Current directory: ", style="bold")
        path.append(snapshot.current_path_text, style="cyan")
        self.prompt_path.update(path)
        if snapshot.answer_text:
            self.prompt_menu.update(Text(snapshot.answer_text, style="cyan"))
        else:
            self.prompt_menu.update(render_menu(snapshot, self.config.page_size))
        if snapshot.error_text:
            self.prompt_status.update(Text(snapshot.error_text, style="bold red"))
        elif snapshot.is_loading:
            self.prompt_status.update("Loading...")
        else:
            self.prompt_status.update("")

    def _on_complete(self, outcome) -> None:
        if isinstance(outcome, SelectionResult):
            self.exit(outcome)
            return
        self.error = outcome
        self.notify(f"{outcome}", severity="error")
        self.exit(None)


def _parse_s3_path(value: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    if not value:
        return None, None
    path = value.strip()
    if path.startswith("s3://"):
        path = path[5:]
    path = path.lstrip("/")
    if not path:
        return None, None
    if "/" not in path:
        return path, None
    bucket, rest = path.split("/", 1)
    return bucket, rest.lstrip("/") or None


def _configure_logging(log_file: Optional[str], verbose: bool) -> None:
    if not log_file:
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Interactively pick an S3 object or folder"
    )
    parser.add_argument(
        "path",
        nargs="?",
        help="Starting location as s3://bucket/prefix or bucket/prefix",
    )
    parser.add_argument("--bucket", help="Bucket to start browsing in")
    parser.add_argument("--prefix", help="Prefix to start browsing at")
    parser.add_argument(
        "--no-bucket-switch",
        action="store_true",
        help="Keep the user inside the starting bucket",
    )
    parser.add_argument(
        "--folder-select",
        action="store_true",
        help="Offer 'Select Current Folder' in every listing",
    )
    parser.add_argument(
        "--no-object-select",
        action="store_true",
        help="Do not allow picking objects",
    )
    parser.add_argument("-p", "--profile", help="AWS profile for the S3 client")
    parser.add_argument("--region", help="AWS region override for S3 client")
    parser.add_argument("--page-size", type=int, help="Menu lines shown at once")
    parser.add_argument("--message", help="Prompt message")
    parser.add_argument("--config", help="Path to a JSON config file")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default="json",
        help="How to print the selection",
    )
    parser.add_argument("--log-file", help="Write logs to this file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug details"
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> PromptConfig:
    file_values = load_config_file(Path(args.config) if args.config else None)
    path_bucket, path_prefix = _parse_s3_path(args.path)
    return PromptConfig.from_sources(
        file_values,
        bucket=args.bucket or path_bucket,
        prefix=args.prefix or path_prefix,
        allow_bucket_switch=False if args.no_bucket_switch else None,
        allow_folder_select=True if args.folder_select else None,
        allow_object_select=False if args.no_object_select else None,
        profile=args.profile,
        region=args.region,
        page_size=args.page_size,
        message=args.message,
    )


def _run_prompt(config: PromptConfig, output_format: str = "json") -> int:
    app = S3Prompt(config)
    result = app.run()
    if app.error is not None:
        print(f"error: {app.error}", file=sys.stderr)
        return EXIT_ERROR
    if result is None:
        return EXIT_CANCELLED
    print(format_result(result, output_format))
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_file, args.verbose)
    try:
        config = _config_from_args(args)
    except ConfigInvalid as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE
    logger.debug("Starting prompt with %s", config)
    return _run_prompt(config, args.format)


if __name__ == "__main__":
    sys.exit(main())
