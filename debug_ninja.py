#!/usr/bin/env python3
# Filename: debug_ninja.py
import argparse
import os
import socket
import sys
from dataclasses import dataclass
from pathlib import Path

import archiver
import config_handler
import ninja_log
from category_collector import DEFAULT_CATEGORIES, Category, CategoryCollector
from ninja_errors import DebugNinjaError, UsageError
from ninja_log import log_ninja_error
from probe_runner import CommandLookup, ProbeRunner
from staging_tree import COMMANDS_DIR, StagingTree, staging_name

PROG = "debug-ninja"

EPILOG = """\
With no category flags, syscmds, logs and cfgs are collected.
FILENAME defaults to ./<hostname>-debug-ninja.tar.gz; use - to write
the archive to standard output. FILENAME must be the last argument.
"""


@dataclass(frozen=True)
class RunConfig:
    categories: frozenset
    # None streams the archive to stdout
    output: Path | None
    staging_parent: Path
    hostname: str


class NinjaArgumentParser(argparse.ArgumentParser):
    def error(self, message):
        raise UsageError(message)


def build_parser() -> NinjaArgumentParser:
    parser = NinjaArgumentParser(
        prog=PROG,
        description="Collect system diagnostics into a single compressed archive.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("-s", "--syscmds", action="store_true", help="Gather output of system inspection commands")
    parser.add_argument("-c", "--cfgs", action="store_true", help="Gather system configuration files")
    parser.add_argument("-l", "--logs", action="store_true", help="Gather system log files")
    parser.add_argument("-e", "--extra", action="store_true", help="Gather output of heavier extra commands")
    parser.add_argument("filename", nargs="?", metavar="FILENAME", help="Archive path, or - for stdout")
    return parser


def parse_arguments(argv, settings: dict, hostname: str | None = None, cwd: str | None = None) -> RunConfig:
    args = build_parser().parse_args(argv)
    if args.filename is not None and argv[-1] != args.filename:
        raise UsageError(f"FILENAME '{args.filename}' must be the last argument")

    selected = frozenset(category for category in Category if getattr(args, category.value))
    hostname = hostname or socket.gethostname()
    cwd = Path(cwd or os.getcwd())

    if args.filename == "-":
        output = None
    elif args.filename:
        output = cwd / args.filename
    else:
        output = cwd / f"{staging_name(hostname)}.tar.gz"

    staging_parent = os.environ.get("TMPDIR") or settings["default_tmp_dir"]
    return RunConfig(
        categories=selected or DEFAULT_CATEGORIES,
        output=output,
        staging_parent=Path(staging_parent),
        hostname=hostname,
    )


def run(config: RunConfig, settings: dict, lookup: CommandLookup | None = None, fs_root: str = "/") -> int:
    archiver.check_destination(config.output)

    tree = StagingTree(config.staging_parent, staging_name(config.hostname))
    tree.create()
    runner = ProbeRunner(
        tree,
        lookup=lookup,
        timeout=settings.get("probe_timeout"),
        sample_count=settings["sample_count"],
        sample_interval=settings["sample_interval"],
    )
    collector = CategoryCollector(
        runner, fs_root=fs_root, sample_interval=settings["sample_interval"], sample_count=settings["sample_count"])
    try:
        tree.ensure_dir(COMMANDS_DIR)
        collector.collect(config.categories)
    except BaseException:
        # Interrupted or failed collection must not leave a root that blocks the next run.
        tree.remove()
        raise
    print(file=sys.stderr, flush=True)

    try:
        archiver.archive(tree.root, config.output)
    except DebugNinjaError as e:
        # Keep what was gathered; the archive is the only other copy.
        raise type(e)(f"{e} (collected data left in {tree.root})") from e
    tree.remove()

    if config.output is not None:
        print(config.output, file=sys.stderr, flush=True)
    return 0


def main(argv=None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    settings = config_handler.load_settings()
    ninja_log.configure(settings.get("log_file"))
    try:
        config = parse_arguments(argv, settings)
    except UsageError as e:
        print(f"{PROG}: {e}", file=sys.stderr)
        print(build_parser().format_usage(), end="", file=sys.stderr, flush=True)
        return 1
    try:
        return run(config, settings)
    except DebugNinjaError as e:
        log_ninja_error(str(e), echo=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
