"""Command-line interface for gamebacklog."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from contextlib import contextmanager
from typing import Iterator

from gamebacklog.config import Settings
from gamebacklog.covers import CoverClient
from gamebacklog.db import Database
from gamebacklog.models import UNSET, GamePatch, GameRecord, Status
from gamebacklog.query import QuerySpec, SortKey, query_and_sort
from gamebacklog.store import CollectionStore
from gamebacklog.views import build_view, sort_label

_STATUS_NAMES = {
    "backlog": Status.BACKLOG,
    "playing": Status.CURRENTLY_PLAYING,
    "played": Status.PLAYED,
    "favorites": Status.FAVORITES,
}


def _parse_status(value: str) -> Status:
    key = value.strip().lower()
    if key in _STATUS_NAMES:
        return _STATUS_NAMES[key]
    try:
        return Status(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"invalid status {value!r} (choose from {', '.join(_STATUS_NAMES)})"
        ) from None


def _parse_sort(value: str) -> SortKey:
    try:
        return SortKey.parse(value)
    except ValueError:
        choices = ", ".join(k.value for k in SortKey)
        raise argparse.ArgumentTypeError(
            f"invalid sort key {value!r} (choose from {choices})"
        ) from None


def _settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if getattr(args, "db", None):
        settings.db_path = args.db
    if getattr(args, "cover_url", None):
        settings.cover_url = args.cover_url
    return settings


def _notify(message: str) -> None:
    print(f"Error: {message}", file=sys.stderr)


@contextmanager
def _open_store(args: argparse.Namespace) -> Iterator[CollectionStore]:
    settings = _settings(args)
    db = Database(settings.db_path)
    covers = CoverClient(settings.cover_url)
    try:
        yield CollectionStore(db, covers, notify=_notify)
    finally:
        covers.close()
        db.close()


def _format_game(game: GameRecord) -> str:
    stars = "*" * (game.rating or 0)
    return f"{game.id}  {game.status.value:<18} {stars:<5}  {game.title}"


# ------------------------------------------------------------------
# Sub-command handlers
# ------------------------------------------------------------------


def cmd_add(args: argparse.Namespace) -> int:
    with _open_store(args) as store:
        game = asyncio.run(store.add_game(args.title, args.status, args.rating))
    if game is None:
        return 1
    print(f"Added game: {game.title} ({game.id})")
    return 0


def cmd_edit(args: argparse.Namespace) -> int:
    rating = None if args.clear_rating else (
        args.rating if args.rating is not None else UNSET
    )
    patch = GamePatch(status=args.status or UNSET, rating=rating)
    with _open_store(args) as store:
        if store.get(args.id) is None:
            print(f"Game {args.id} not found.", file=sys.stderr)
            return 1
        game = store.update_game(args.id, patch)
    if game is None:
        return 1
    print(f"Updated game: {_format_game(game)}")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    with _open_store(args) as store:
        removed = store.remove_game(args.id)
    if removed:
        print(f"Removed game {args.id}.")
        return 0
    print(f"Game {args.id} not found.", file=sys.stderr)
    return 1


def cmd_cover(args: argparse.Namespace) -> int:
    with _open_store(args) as store:
        game = asyncio.run(store.refresh_cover(args.id))
    if game is None:
        print(f"Game {args.id} not found.", file=sys.stderr)
        return 1
    print(f"{game.title}: {game.image_url}")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    spec = QuerySpec(
        search_text=args.search or "",
        status_scope=args.status,
        favorites_only=args.favorites,
        sort_key=args.sort,
    )
    with _open_store(args) as store:
        games = query_and_sort(store.records, spec)
    if not games:
        print("No games tracked.")
        return 0
    print(sort_label(spec.sort_key))
    print("-" * 72)
    for game in games:
        print(_format_game(game))
    return 0


def cmd_stats(args: argparse.Namespace) -> int:
    with _open_store(args) as store:
        view = build_view(store.records, QuerySpec(sort_key=args.sort))

    print(f"\n=== Collection summary ({view.total} games) ===")
    for status, count in view.counts.items():
        print(f"  {status.value:<18}: {count}")

    print("\n  Ratings:")
    for rating, count in view.histogram.items():
        pct = view.rating_percentages[rating]
        print(f"    {rating} star{'s' if rating > 1 else ' '}  {count:>4}  ({pct}%)")

    if view.playing_shelf:
        print("\n  Currently playing:")
        for game in view.playing_shelf:
            print(f"    {game.title}")
    if view.favorites_shelf:
        print("\n  Favorites:")
        for game in view.favorites_shelf:
            print(f"    {game.title}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from gamebacklog.server import create_app

    settings = _settings(args)
    app = create_app(settings)
    app.run(host=args.host, port=args.port or settings.port)
    return 0


# ------------------------------------------------------------------
# Argument parser
# ------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamebacklog",
        description="Track a personal game backlog with IGDB cover art.",
    )
    parser.add_argument(
        "--db",
        metavar="PATH",
        default=None,
        help="Path to the SQLite database file (default: ~/.gamebacklog/gamebacklog.db)",
    )
    parser.add_argument(
        "--cover-url",
        dest="cover_url",
        metavar="URL",
        default=None,
        help="Base URL of the cover lookup server (overrides GAMEBACKLOG_COVER_URL)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add_p = subparsers.add_parser("add", help="Add a game")
    add_p.add_argument("title", help="Game title")
    add_p.add_argument(
        "--status", type=_parse_status, default=Status.BACKLOG, help="Initial status"
    )
    add_p.add_argument("--rating", type=int, default=None, help="Rating from 1 to 5")
    add_p.set_defaults(func=cmd_add)

    edit_p = subparsers.add_parser("edit", help="Change a game's status or rating")
    edit_p.add_argument("id", help="Game id")
    edit_p.add_argument("--status", type=_parse_status, default=None, help="New status")
    rating_group = edit_p.add_mutually_exclusive_group()
    rating_group.add_argument("--rating", type=int, default=None, help="New rating")
    rating_group.add_argument(
        "--clear-rating",
        dest="clear_rating",
        action="store_true",
        help="Remove the rating",
    )
    edit_p.set_defaults(func=cmd_edit)

    rm_p = subparsers.add_parser("remove", help="Remove a game")
    rm_p.add_argument("id", help="Game id")
    rm_p.set_defaults(func=cmd_remove)

    cover_p = subparsers.add_parser("cover", help="Look up a game's cover again")
    cover_p.add_argument("id", help="Game id")
    cover_p.set_defaults(func=cmd_cover)

    list_p = subparsers.add_parser("list", help="List games")
    list_p.add_argument("--search", default="", help="Filter by title substring")
    list_p.add_argument("--status", type=_parse_status, default=None, help="Only this status")
    list_p.add_argument("--favorites", action="store_true", help="Only favorites")
    list_p.add_argument(
        "--sort", type=_parse_sort, default=SortKey.LAST_ADDED, help="Sort order"
    )
    list_p.set_defaults(func=cmd_list)

    stats_p = subparsers.add_parser("stats", help="Show counts, ratings and shelves")
    stats_p.add_argument(
        "--sort", type=_parse_sort, default=SortKey.LAST_ADDED, help="Shelf order"
    )
    stats_p.set_defaults(func=cmd_stats)

    serve_p = subparsers.add_parser("serve", help="Run the cover lookup server")
    serve_p.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_p.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 3000)")
    serve_p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    return func(args)


if __name__ == "__main__":
    sys.exit(main())
