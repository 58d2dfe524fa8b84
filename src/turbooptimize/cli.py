"""Command line entry point: ``turbooptimize BUILD_DIR``."""

from __future__ import annotations

import argparse
import logging
import sys

from .errors import OptimizeError
from .optimize import optimize
from .options import OptimizeOptions, load_options

EXIT_FATAL = 1
EXIT_FILE_FAILURES = 2


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid int value: {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="turbooptimize",
        description="Minify a static build directory and preload what each HTML page imports.",
    )
    parser.add_argument("build_dir", help="finished build output directory (rewritten in place)")
    parser.add_argument("--config", help="JSON file with optimize options")
    parser.add_argument("--no-minify-js", dest="minify_js", action="store_false", default=None)
    parser.add_argument("--no-minify-css", dest="minify_css", action="store_false", default=None)
    parser.add_argument("--no-minify-html", dest="minify_html", action="store_false", default=None)
    parser.add_argument(
        "--no-preload-css",
        dest="preload_css",
        action="store_false",
        default=None,
        help="do not combine JS-imported CSS into one linked stylesheet",
    )
    parser.add_argument(
        "--preload-modules",
        dest="preload_modules",
        action="store_true",
        default=None,
        help="add modulepreload hints for transitive module imports",
    )
    parser.add_argument("--combined-css-name", metavar="URL", help="where to write the combined stylesheet")
    parser.add_argument(
        "--exclude",
        metavar="GLOB",
        action="append",
        help="skip files matching GLOB (relative to BUILD_DIR); repeatable",
    )
    parser.add_argument("--target", help="JS target, e.g. es2018 or chrome80,firefox78")
    parser.add_argument("--meta-dir", help="build metadata directory holding the manifest")
    parser.add_argument("-j", "--jobs", type=positive_int, help="number of worker threads (default: CPU count)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help=f"exit with status {EXIT_FILE_FAILURES} when any file fails to optimize",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="log every file")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="only log warnings and errors")
    return parser


def resolve_options(args: argparse.Namespace) -> OptimizeOptions:
    """Config file values, overridden by any flag given on the command line."""
    options = load_options(args.config) if args.config else OptimizeOptions()
    overrides = {}
    for name in (
        "minify_js",
        "minify_css",
        "minify_html",
        "preload_css",
        "preload_modules",
        "combined_css_name",
        "target",
        "meta_dir",
    ):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    if args.exclude:
        overrides["exclude"] = (*options.exclude, *args.exclude)
    return options.replace(**overrides) if overrides else options


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        options = resolve_options(args)
        report = optimize(args.build_dir, options, max_workers=args.jobs)
    except OptimizeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    print(
        f"Optimized {len(report.files)} files, {len(report.manifest)} HTML entry points, "
        f"{len(report.failures)} failed"
    )
    if report.failures and args.strict:
        return EXIT_FILE_FAILURES
    return 0


if __name__ == "__main__":
    sys.exit(main())
