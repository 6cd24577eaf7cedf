"""
CLI (Command Line Interface).

Terminal front end for the classification and query engine, e.g.:

    dropin search --category swimming --date this-week --time 18:00
    dropin search --from-url "https://example.org/?category=sports&age=15"
    dropin classify "Senior Yoga" --age-min 60
    dropin categories
    dropin programs swim --category swimming
    dropin share --category sports --location "Regent Park Community Centre"

Note:
- All filtering happens in dropin/search.py; this module only parses
  arguments, loads data and prints
- Data sources default to dropin/data/ (or $DROPIN_DATA_DIR) and can be
  overridden per source with a path or an http(s) URL
"""

from __future__ import annotations

import argparse
from datetime import date, datetime
from typing import Optional

from rich import box
from rich.console import Console
from rich.table import Table

from dropin.classify import classify, icon_for
from dropin.loader import DataLoadError, Snapshot, load_snapshot
from dropin.model import FilterSpec
from dropin.search import available_categories, available_subcategories, program_options, search, upcoming_sessions
from dropin.sharing import decode_filter_spec, encode_filter_spec
from dropin.sorting import DEFAULT_SORT, SORT_ORDERS, sort_results
from dropin.taxonomy import get_category
from dropin.timeutils import THIS_WEEK, format_time_ampm


console = Console()


def _parse_today(text: Optional[str]) -> Optional[date]:
    if not text:
        return None
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"--today must be YYYY-MM-DD, got {text!r}")


def _load(args: argparse.Namespace, with_geo: bool = True) -> Optional[Snapshot]:
    """
    Load the snapshot; print the error and return None on failure.
    """
    try:
        snapshot = load_snapshot(
            sessions_source=args.sessions,
            locations_source=args.locations,
            geo_source=args.geo,
            with_geo=with_geo and not args.no_geo,
        )
    except DataLoadError as exc:
        print(f"Failed to load recreation data: {exc}")
        print("Check the data sources and try again.")
        return None

    print(f"Loaded {len(snapshot.sessions)} sessions, {len(snapshot.locations)} locations")
    return snapshot


def _sessions_in_scope(args: argparse.Namespace, snapshot: Snapshot, today: Optional[date]) -> list:
    if args.all_sessions:
        return list(snapshot.sessions)
    return upcoming_sessions(snapshot.sessions, today)


def _spec_from_args(args: argparse.Namespace) -> FilterSpec:
    if args.from_url:
        spec = decode_filter_spec(args.from_url)
        # explicit date/time flags still win over the fresh defaults
        if args.date:
            spec.date = args.date
        if args.time:
            spec.time = args.time
        return spec

    return FilterSpec(
        course_title=args.program or "",
        category=args.category or "",
        subcategory=args.subcategory or "",
        date=args.date or "",
        time=args.time or "",
        location=list(args.location or []),
        age=args.age or "",
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _cmd_search(args: argparse.Namespace) -> int:
    """
    Run one query and print the results as a table.
    """
    try:
        today = _parse_today(args.today)
    except argparse.ArgumentTypeError as exc:
        print(exc)
        return 2

    spec = _spec_from_args(args)
    if spec.category and get_category(spec.category) is None:
        print(f"Unknown category: {spec.category}")
        return 1

    snapshot = _load(args)
    if snapshot is None:
        return 1

    sessions = _sessions_in_scope(args, snapshot, today)
    results = search(sessions, snapshot.locations, spec, snapshot.facilities, today=today)
    results = sort_results(results, args.sort)

    if not results:
        print("No programs found matching your criteria.")
        return 0

    shown = results[: args.limit] if args.limit > 0 else results

    table = Table(title=f"Results ({len(results)})", box=box.SIMPLE)
    table.add_column("Program")
    table.add_column("Location")
    table.add_column("Day")
    table.add_column("Time")
    table.add_column("Ages")
    table.add_column("Category")
    for r in shown:
        category = f"{r.category}/{r.subcategory}" if r.category else ""
        time_range = f"{format_time_ampm(r.start_time)} - {format_time_ampm(r.end_time)}"
        day = f"{r.day_of_week} {r.date}".strip()
        table.add_row(
            f"[bold]{r.course_title}[/]",
            f"[cyan]{r.location}[/]",
            day,
            time_range,
            r.age_range,
            f"[green]{category}[/]" if category else "",
        )
    console.print(table)

    if len(results) > len(shown):
        print(f"... and {len(results) - len(shown)} more results")
    return 0


def _cmd_classify(args: argparse.Namespace) -> int:
    title = (args.title or "").strip()
    if not title:
        print("Please provide a program title.")
        return 1

    labels = classify(title, args.age_min, args.age_max)
    icon = icon_for(title, args.age_min, args.age_max)

    if not labels:
        print(f"Uncategorized (icon: {icon})")
        return 0

    for label in labels:
        print(f"{label.category}/{label.subcategory}")
    print(f"icon: {icon}")
    return 0


def _cmd_categories(args: argparse.Namespace) -> int:
    """
    List the taxonomy, limited to entries with programs in the coming week.
    """
    snapshot = _load(args, with_geo=False)
    if snapshot is None:
        return 1

    sessions = list(snapshot.sessions)
    table = Table(title="Categories with programs this week", box=box.SIMPLE)
    table.add_column("Category")
    table.add_column("Subcategories")
    for category in available_categories(sessions):
        subs = available_subcategories(sessions, category.id)
        table.add_row(
            f"[bold cyan]{category.name}[/] ({category.id})",
            ", ".join(f"{s.name} ({s.id})" for s in subs),
        )
    console.print(table)
    return 0


def _cmd_programs(args: argparse.Namespace) -> int:
    snapshot = _load(args, with_geo=False)
    if snapshot is None:
        return 1

    sessions = upcoming_sessions(snapshot.sessions)
    titles = program_options(sessions, args.category or "", args.subcategory or "", args.text or "")
    if not titles:
        print("No results.")
        return 0

    for title in titles[: args.limit]:
        print(title)
    if len(titles) > args.limit:
        print(f"... and {len(titles) - args.limit} more results")
    return 0


def _cmd_share(args: argparse.Namespace) -> int:
    spec = FilterSpec(
        course_title=args.program or "",
        category=args.category or "",
        subcategory=args.subcategory or "",
        location=list(args.location or []),
        age=args.age or "",
    )
    print(encode_filter_spec(spec, args.base_url))
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_data_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--sessions", type=str, default=None, help="Session registry (path or URL)")
    p.add_argument("--locations", type=str, default=None, help="Location registry (path or URL)")
    p.add_argument("--geo", type=str, default=None, help="Facility GeoJSON layer (path or URL)")
    p.add_argument("--no-geo", action="store_true", help="Skip the facility layer")


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--category", "-c", type=str, help="Category id (e.g. swimming)")
    p.add_argument("--subcategory", "-s", type=str, help="Subcategory id (e.g. lane-swim)")
    p.add_argument("--program", "-p", type=str, help="Exact program title")
    p.add_argument("--location", "-l", action="append", help="Location name (repeatable)")
    p.add_argument("--age", "-a", type=str, help="Participant age")


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="dropin", description="Drop-in recreation program finder")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search drop-in sessions")
    _add_filter_args(p_search)
    p_search.add_argument("--date", "-d", type=str, help=f"YYYY-MM-DD or '{THIS_WEEK}'")
    p_search.add_argument("--time", "-t", type=str, help="HH:MM, h:MM AM/PM or 'Any Time'")
    p_search.add_argument("--from-url", type=str, help="Share link or query string to load filters from")
    p_search.add_argument("--sort", choices=SORT_ORDERS + ("alphabetical",), default=DEFAULT_SORT)
    p_search.add_argument("--limit", type=int, default=50, help="Max rows to print (0 = all)")
    p_search.add_argument("--today", type=str, help="Override today's date (YYYY-MM-DD)")
    p_search.add_argument("--all-sessions", action="store_true", help="Do not restrict to the coming week")
    _add_data_args(p_search)

    p_classify = sub.add_parser("classify", help="Classify a program title")
    p_classify.add_argument("title", type=str, help="Program title")
    p_classify.add_argument("--age-min", type=str, default=None)
    p_classify.add_argument("--age-max", type=str, default=None)

    p_categories = sub.add_parser("categories", help="List categories with programs this week")
    _add_data_args(p_categories)

    p_programs = sub.add_parser("programs", help="List program titles (autocomplete)")
    p_programs.add_argument("text", type=str, nargs="?", default="", help="Search text")
    p_programs.add_argument("--category", "-c", type=str)
    p_programs.add_argument("--subcategory", "-s", type=str)
    p_programs.add_argument("--limit", type=int, default=30)
    _add_data_args(p_programs)

    p_share = sub.add_parser("share", help="Print a share link for a set of filters")
    _add_filter_args(p_share)
    p_share.add_argument("--base-url", type=str, default="", help="Page URL to prefix")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "search":
        raise SystemExit(_cmd_search(args))
    if args.command == "classify":
        raise SystemExit(_cmd_classify(args))
    if args.command == "categories":
        raise SystemExit(_cmd_categories(args))
    if args.command == "programs":
        raise SystemExit(_cmd_programs(args))
    if args.command == "share":
        raise SystemExit(_cmd_share(args))

    raise SystemExit(2)
