"""Command-line interface for docsniff."""

from __future__ import annotations

import argparse
import fnmatch
import json
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TextIO

from docsniff.errors import LexError
from docsniff.files import SourceFile

REPORTS = ("full", "summary", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    paths: list[Path]
    extensions: list[str]
    exclude: list[str]
    ignore_codes: list[str]
    report: str
    warnings: bool
    verbose: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="docsniff",
        description="Check PHP function doc comments",
    )
    p.add_argument("paths", nargs="+", help="Files or directories to scan")
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover docsniff.toml)",
    )
    p.add_argument(
        "--extensions",
        metavar="EXT[,EXT...]",
        help="File extensions to scan in directories (default: php)",
    )
    p.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Glob pattern of paths to skip (repeatable)",
    )
    p.add_argument(
        "--ignore-code",
        action="append",
        default=[],
        metavar="CODE",
        help="Diagnostic code to drop, e.g. EmptySees (repeatable)",
    )
    p.add_argument("--report", choices=REPORTS, default=None, help="Report format (default: full)")
    p.add_argument("-n", "--no-warnings", action="store_true", help="Do not report warnings")
    p.add_argument("-v", "--verbose", action="store_true", help="Print each scanned file to stderr")
    p.add_argument("--debug", action="store_true", help="Dump token streams to stderr")
    return p


def parse_extensions(s: str) -> list[str]:
    """Parse a comma separated extension list, dropping leading dots."""
    exts = [part.strip().lstrip(".") for part in s.split(",")]
    exts = [e for e in exts if e]
    if not exts:
        raise argparse.ArgumentTypeError(f"invalid extension list: {s!r}")
    return exts


def load_config(config_path: Path | None, base_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else base_dir / "docsniff.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def _str_list(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value]
    return []


def resolve_options(args: argparse.Namespace, base_dir: Path | None = None) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: defaults < config file < CLI flags.
    """
    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, base_dir if base_dir is not None else Path("."))

    # Extensions: config < CLI
    extensions = ["php"]
    cfg_exts = _str_list(config.get("extensions"))
    if cfg_exts:
        extensions = [e.lstrip(".") for e in cfg_exts]
    if args.extensions:
        extensions = parse_extensions(args.extensions)

    # Exclude patterns and ignored codes accumulate
    exclude = _str_list(config.get("exclude")) + list(args.exclude)
    ignore_codes = _str_list(config.get("ignore_codes")) + list(args.ignore_code)

    report = "full"
    cfg_report = config.get("report")
    if isinstance(cfg_report, str):
        if cfg_report not in REPORTS:
            raise argparse.ArgumentTypeError(f"invalid report in config: {cfg_report}")
        report = cfg_report
    if args.report:
        report = args.report

    warnings = True
    cfg_warnings = config.get("warnings")
    if isinstance(cfg_warnings, bool):
        warnings = cfg_warnings
    if args.no_warnings:
        warnings = False

    return CliOptions(
        paths=[Path(p) for p in args.paths],
        extensions=extensions,
        exclude=exclude,
        ignore_codes=ignore_codes,
        report=report,
        warnings=warnings,
        verbose=args.verbose,
        debug=args.debug,
    )


def is_excluded(path: Path, patterns: list[str]) -> bool:
    text = path.as_posix()
    return any(fnmatch.fnmatch(text, pat) or fnmatch.fnmatch(path.name, pat) for pat in patterns)


def collect_files(options: CliOptions) -> list[Path]:
    """Expand the given paths into a sorted, de-duplicated list of files to scan.

    Files named explicitly are always scanned; directories are walked for the
    configured extensions.
    """
    found: set[Path] = set()
    for path in options.paths:
        if path.is_dir():
            for ext in options.extensions:
                for child in path.rglob(f"*.{ext}"):
                    if child.is_file() and not is_excluded(child, options.exclude):
                        found.add(child)
        elif not is_excluded(path, options.exclude):
            found.add(path)
    return sorted(found)


def scan_file(path: Path, options: CliOptions) -> SourceFile:
    """Read and check one file, dropping ignored codes and (optionally) warnings."""
    from docsniff.debug import dump_tokens
    from docsniff.diagnostics import Severity
    from docsniff.rule import check_file

    source = path.read_text(encoding="utf-8")
    file = SourceFile(source, str(path))

    if options.debug:
        dump_tokens(file.tokens, file=sys.stderr)

    check_file(file)
    file.diagnostics = [
        d
        for d in file.diagnostics
        if d.code not in options.ignore_codes
        and d.full_code not in options.ignore_codes
        and (options.warnings or d.severity != Severity.WARNING)
    ]
    return file


# ----------------------------------------------------------------------
# Reports
# ----------------------------------------------------------------------


def report_full(files: list[SourceFile], out: TextIO) -> None:
    for file in files:
        for diag in file.diagnostics:
            out.write(diag.format(file.source, file.filename))
            out.write("\n\n")
    report_summary(files, out, show_clean=False)


def report_summary(files: list[SourceFile], out: TextIO, show_clean: bool = True) -> None:
    total_errors = 0
    total_warnings = 0
    for file in files:
        errors = len(file.errors)
        warnings = len(file.warnings)
        total_errors += errors
        total_warnings += warnings
        if errors or warnings or show_clean:
            out.write(f"{file.filename}: {errors} error(s), {warnings} warning(s)\n")

    metrics = merge_metrics(files)
    for name, values in sorted(metrics.items()):
        counts = ", ".join(f"{value}={count}" for value, count in sorted(values.items()))
        out.write(f"{name}: {counts}\n")
    out.write(
        f"Found {total_errors} error(s) and {total_warnings} warning(s) in {len(files)} file(s)\n"
    )


def report_json(files: list[SourceFile], out: TextIO) -> None:
    data: dict[str, Any] = {
        "totals": {
            "errors": sum(len(f.errors) for f in files),
            "warnings": sum(len(f.warnings) for f in files),
        },
        "files": {},
        "metrics": merge_metrics(files),
    }
    for file in files:
        data["files"][file.filename] = {
            "errors": len(file.errors),
            "warnings": len(file.warnings),
            "messages": [
                {
                    "message": d.message,
                    "source": d.full_code,
                    "severity": d.severity.value,
                    "line": d.line,
                    "column": d.column,
                }
                for d in file.diagnostics
            ],
        }
    json.dump(data, out, indent=2)
    out.write("\n")


def merge_metrics(files: list[SourceFile]) -> dict[str, dict[str, int]]:
    merged: dict[str, dict[str, int]] = {}
    for file in files:
        for name, values in file.metric_totals().items():
            counts = merged.setdefault(name, {})
            for value, count in values.items():
                counts[value] = counts.get(value, 0) + count
    return merged


_REPORTERS = {
    "full": report_full,
    "summary": report_summary,
    "json": report_json,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    scanned: list[SourceFile] = []
    failed = False
    for path in collect_files(options):
        if options.verbose:
            print(f"Scanning {path}", file=sys.stderr)
        try:
            scanned.append(scan_file(path, options))
        except (OSError, UnicodeDecodeError) as exc:
            print(f"error: cannot read {path}: {exc}", file=sys.stderr)
            failed = True
        except LexError as exc:
            print(exc.format(str(path)), file=sys.stderr)
            failed = True

    _REPORTERS[options.report](scanned, sys.stdout)

    if failed:
        return 2
    if any(f.diagnostics for f in scanned):
        return 1
    return 0
