"""CLI entrypoint for course front-matter linting."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable

from . import __version__
from .checks import RULES
from .config import ConfigError, load_config
from .content_loader import bundled_course_root
from .models import LintReport, Page
from .service import CourseService

PrintFn = Callable[[str], None]

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2

logger = logging.getLogger("coursecheck")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(prog="coursecheck", description="Lint course page front-matter")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    parser.add_argument("--config", default=None, help="Config file (default: ROOT/.coursecheck.yaml).")
    commands = parser.add_subparsers(dest="command", required=True)

    lint = commands.add_parser("lint", help="Check page front-matter integrity.")
    lint.add_argument("root", nargs="?", default=".")
    lint.add_argument("--format", choices=["text", "json"], default="text")
    lint.add_argument("--output", default=None, help="Also write the JSON report to this file.")
    lint.add_argument("--bundled", action="store_true", help="Lint the sample course shipped with coursecheck.")

    order = commands.add_parser("order", help="Print pages in learning order.")
    order.add_argument("root", nargs="?", default=".")

    deps = commands.add_parser("deps", help="Print the prerequisites of one page.")
    deps.add_argument("page_id")
    deps.add_argument("root", nargs="?", default=".")
    deps.add_argument("--direct", action="store_true", help="Only list direct dependencies.")
    deps.add_argument("--reverse", action="store_true", help="List pages that depend on PAGE_ID instead.")

    tags = commands.add_parser("tags", help="Print the tag index.")
    tags.add_argument("root", nargs="?", default=".")

    commands.add_parser("rules", help="List lint rule codes.")
    return parser


def run(argv: list[str] | None = None, print_fn: PrintFn = print) -> int:
    """Run the CLI application."""
    args = build_parser().parse_args(argv)
    _setup_logging(args.verbose)

    if args.command == "rules":
        for code, summary in RULES.items():
            print_fn(f"{code}  {summary}")
        return EXIT_OK

    root = bundled_course_root() if getattr(args, "bundled", False) else args.root
    try:
        config = load_config(args.config, root=root)
        service = CourseService(root, config)
        if args.command == "lint":
            return _lint_command(service, args.format, args.output, print_fn)
        if args.command == "order":
            _print_pages(service.learning_order(), print_fn, numbered=True)
        elif args.command == "deps":
            if args.reverse:
                pages = service.dependents_of(args.page_id, transitive=not args.direct)
            else:
                pages = service.prerequisites_of(args.page_id, transitive=not args.direct)
            _print_pages(pages, print_fn)
        elif args.command == "tags":
            index = service.pages_by_tag()
            if not index:
                print_fn("(no tags)")
            for tag, page_ids in index.items():
                print_fn(f"{tag}: {', '.join(page_ids)}")
    except KeyError as exc:
        print_fn(f"error: unknown page id {exc}")
        return EXIT_USAGE
    except (ConfigError, FileNotFoundError, ValueError) as exc:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print_fn(f"error: {exc}")
        return EXIT_USAGE
    return EXIT_OK


def _lint_command(service: CourseService, output_format: str, output: str | None, print_fn: PrintFn) -> int:
    report = service.lint()
    if output:
        service.export_report(report, output)
    if output_format == "json":
        print_fn(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report, print_fn)
    return EXIT_OK if report.ok else EXIT_FINDINGS


def _print_report(report: LintReport, print_fn: PrintFn) -> None:
    for finding in report.findings:
        print_fn(f"{finding.path}: {finding.code} {finding.severity}: {finding.message}")
    print_fn(
        f"{report.page_count} page(s) checked: "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )


def _print_pages(pages: list[Page], print_fn: PrintFn, *, numbered: bool = False) -> None:
    if not pages:
        print_fn("(none)")
        return
    id_width = max(len(page.id) for page in pages)
    for idx, page in enumerate(pages, start=1):
        prefix = f"{idx:>3}) " if numbered else ""
        print_fn(f"{prefix}{page.id:<{id_width}}  {page.name}")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
