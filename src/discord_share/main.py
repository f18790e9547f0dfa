from __future__ import annotations

import argparse
import asyncio
import logging
import logging.handlers
import sys
from pathlib import Path

from discord_share import __version__

DEFAULT_CONFIG_PATH = Path("config.yaml")


def _setup_logging(level: str = "WARNING", log_dir: str | None = None) -> None:
    log_format = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))

    # Console handler is always on
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(log_format))
    root.addHandler(console)

    if not log_dir:
        return

    # Rotating file handler: one file per day, keep 7 days
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)
    file_handler = logging.handlers.TimedRotatingFileHandler(
        path / "discord-share.log",
        when="midnight",
        backupCount=7,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(log_format))
    root.addHandler(file_handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="discord-share",
        description="Share a file, or a range of its lines, to Discord through a webhook.",
    )
    parser.add_argument("path", help="File to share, or '-' to read standard input")
    parser.add_argument(
        "--lines",
        metavar="START:END",
        help="Share only this 1-based inclusive line range (e.g. 10:42)",
    )
    parser.add_argument("--name", help="File name to show (defaults to the path; useful with '-')")
    parser.add_argument("--comment", help="Comment attached to the first embed; skips the prompt")
    parser.add_argument("--mode", choices=["embed", "message"], help="Override the configured mode")
    numbers = parser.add_mutually_exclusive_group()
    numbers.add_argument(
        "--line-numbers", dest="line_numbers", action="store_true", default=None,
        help="Prefix each line with its line number",
    )
    numbers.add_argument(
        "--no-line-numbers", dest="line_numbers", action="store_false",
        help="Do not prefix line numbers",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Config file (default: {DEFAULT_CONFIG_PATH} when present)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _read_comment() -> str | None:
    try:
        return input("Comment (optional, Enter to skip, Ctrl-D to cancel): ")
    except EOFError:
        print(file=sys.stderr)
        return None


async def _prompt_comment() -> str | None:
    """Ask for an optional comment on the terminal; EOF cancels."""
    return await asyncio.to_thread(_read_comment)


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    from discord_share.config import load_config

    config: dict = {}
    config_error: str | None = None
    config_path = args.config or DEFAULT_CONFIG_PATH
    if args.config is not None or config_path.exists():
        try:
            config = load_config(config_path)
        except Exception as exc:
            config_error = f"Failed to load {config_path}: {exc}"

    log_cfg = config.get("logging") or {}
    if not isinstance(log_cfg, dict):
        config_error = config_error or f"Failed to load {config_path}: logging must be a mapping"
        log_cfg = {}
    _setup_logging(
        "INFO" if args.verbose else log_cfg.get("level", "WARNING"),
        log_cfg.get("dir"),
    )
    if config_error:
        print(config_error, file=sys.stderr)
        return 1

    from discord_share.service import ShareService
    from discord_share.source import parse_line_range, read_source

    try:
        start, end = parse_line_range(args.lines) if args.lines else (None, None)
        source = read_source(args.path, start=start, end=end, name=args.name)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return 1

    service = ShareService(
        config,
        mode=args.mode,
        show_line_numbers=args.line_numbers,
        prompt=_prompt_comment,
    )
    try:
        outcome = asyncio.run(service.share(source, comment=args.comment))
    except KeyboardInterrupt:
        print(file=sys.stderr)
        return 130

    if outcome.message:
        print(outcome.message, file=sys.stdout if outcome.ok else sys.stderr)
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main())
