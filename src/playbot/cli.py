"""Interactive command line for browsing libraries and playing from them."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from typing import Callable

from playbot.config import DEFAULT_CONFIG_PATH, load_config
from playbot.service import BotService
from playbot.statemachine import InvalidTransitionError

Handler = Callable[[BotService, str | None], None]


def _print_status(service: BotService) -> None:
    player = service.player
    current = player.current
    print(
        f"  [{player.state.name}]"
        f"  track: {current.name if current else '–'}"
        f"  queued: {len(player.queue)}"
    )


def _require(arg: str | None) -> str:
    if not arg:
        raise ValueError("This command needs a library reference, e.g. music/Album.")
    return arg


def _cmd_libraries(service: BotService, arg: str | None) -> None:
    for name, library in service.libraries.items():
        print(f"  {name}  ({library.root})")
    for name, error in service.failures.items():
        print(f"  {name}  UNAVAILABLE: {error}")


def _cmd_tree(service: BotService, arg: str | None) -> None:
    print(str(service.resolve(_require(arg))), end="")


def _cmd_ls(service: BotService, arg: str | None) -> None:
    item = service.resolve(_require(arg))
    for child in item.nested():
        print(f"  {child.title}/")
    for path in item.files():
        print(f"  {path.name}")


def _cmd_add(service: BotService, arg: str | None) -> None:
    added = service.enqueue(_require(arg))
    print(f"  Queued {added} file(s).")


def _cmd_queue(service: BotService, arg: str | None) -> None:
    player = service.player
    for i, path in enumerate(player.queue):
        marker = ">" if i == player.position else " "
        print(f"  {marker} {path}")


def _cmd_play(service: BotService, arg: str | None) -> None:
    service.player.play()
    _print_status(service)


def _cmd_pause(service: BotService, arg: str | None) -> None:
    service.player.pause()
    _print_status(service)


def _cmd_next(service: BotService, arg: str | None) -> None:
    service.player.next_track()
    _print_status(service)


def _cmd_prev(service: BotService, arg: str | None) -> None:
    service.player.previous_track()
    _print_status(service)


def _cmd_clear(service: BotService, arg: str | None) -> None:
    service.player.clear()
    _print_status(service)


def _cmd_status(service: BotService, arg: str | None) -> None:
    _print_status(service)


# name -> (handler, admin only)
COMMANDS: dict[str, tuple[Handler, bool]] = {
    "libraries": (_cmd_libraries, False),
    "tree": (_cmd_tree, False),
    "ls": (_cmd_ls, False),
    "add": (_cmd_add, False),
    "queue": (_cmd_queue, False),
    "play": (_cmd_play, False),
    "pause": (_cmd_pause, False),
    "next": (_cmd_next, False),
    "prev": (_cmd_prev, False),
    "clear": (_cmd_clear, True),
    "status": (_cmd_status, False),
}


def run_command(service: BotService, user: str, raw: str) -> None:
    """Run one command line typed by *user*."""
    parts = raw.split(maxsplit=1)
    cmd = parts[0].lower()
    arg = parts[1] if len(parts) > 1 else None

    try:
        handler, admin_only = COMMANDS[cmd]
    except KeyError:
        print(f"  Unknown command: {cmd}")
        return

    if not service.has_permission(user, admin_only):
        print(f"  {user} is not allowed to run '{cmd}'.")
        return

    try:
        handler(service, arg)
    except (InvalidTransitionError, LookupError, ValueError) as exc:
        print(f"  Error: {exc}")


def _parse_library(value: str) -> tuple[str, str]:
    name, sep, root = value.partition("=")
    if not sep or not name or not root:
        raise argparse.ArgumentTypeError(f"expected NAME=DIR, got {value!r}")
    return name, root


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="playbot – browse media libraries and play from them",
    )
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG_PATH),
        help=f"Path to TOML config file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--library",
        action="append",
        type=_parse_library,
        default=[],
        metavar="NAME=DIR",
        help="Add or replace a library root (may be repeated)",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print every library tree and exit",
    )
    parser.add_argument(
        "--user",
        default=None,
        help="User name for permission checks (default: login name)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        cfg = load_config(args.config)
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        sys.exit(1)
    for name, root in args.library:
        cfg.libraries[name] = root

    if not cfg.libraries:
        print(f"No libraries configured in {args.config}")
        sys.exit(1)

    if args.dump:
        service = BotService(cfg)
        service.start()
        for name, library in service.libraries.items():
            print(f"===== {name} ({library.root}) =====")
            print(str(library), end="")
        for name, error in service.failures.items():
            print(f"===== {name} UNAVAILABLE: {error}", file=sys.stderr)
        if service.failures:
            sys.exit(1)
        return

    from playbot.audio import AudioOutput

    user = args.user or getpass.getuser()
    audio = AudioOutput()
    service = BotService(cfg, audio=audio)
    service.start()

    print("playbot – interactive mode")
    print(f"Available commands: {', '.join(COMMANDS)}, quit")
    print()

    try:
        while True:
            try:
                raw = input("playbot> ").strip()
            except (EOFError, KeyboardInterrupt):
                print()
                break

            audio.check_events()

            if not raw:
                continue
            if raw.lower() == "quit":
                break
            run_command(service, user, raw)
    finally:
        service.stop()


if __name__ == "__main__":
    main()
