import argparse
from pathlib import Path
from typing import List, Optional

from . import __version__
from .aurora import AuroraClient, ExecutableNotFound, resolve_executable
from .config import Settings, load_settings, split_list
from .jobs import JobFilter
from .logger import configure_logger
from .status import run_status


def _flag_list(values: Optional[List[str]]) -> Optional[tuple]:
    """Flatten repeated, comma separated flag values. None when not given."""
    if not values:
        return None
    result = []
    for v in values:
        result.extend(split_list(v))
    return tuple(result)


def settings_from_args(args: argparse.Namespace) -> Settings:
    config_file = Path(args.config) if args.config else None
    settings = load_settings(config_file)
    return settings.merged(
        aurora=args.aurora,
        concurrency=args.concurrency,
        verbose=True if args.verbose else None,
        debug=True if args.debug else None,
        clusters=_flag_list(args.cluster),
        roles=_flag_list(args.role),
        envs=_flag_list(args.env),
        jobs=_flag_list(args.job),
        log_dir=args.log_dir,
    )


def cmd_status(args: argparse.Namespace) -> int:
    settings = settings_from_args(args)
    if settings.concurrency < 1:
        raise SystemExit(f"Concurrency must be at least 1, got {settings.concurrency}")

    logger = configure_logger(
        level="DEBUG" if settings.debug else "INFO",
        log_dir=settings.log_dir,
    )
    if args.config:
        logger.info(f"Using config file: {args.config}")

    try:
        exe_path = resolve_executable(settings.aurora)
    except ExecutableNotFound as e:
        logger.critical(str(e))
        return 1
    logger.info(f"{settings.aurora} is available at {exe_path}")

    client = AuroraClient(exe_path, debug=settings.debug, executable_name=settings.aurora)
    job_filter = JobFilter.from_lists(
        roles=settings.roles,
        envs=settings.envs,
        jobs=settings.jobs,
        clusters=settings.clusters,
    )
    run_status(
        client,
        args.files,
        job_filter,
        verbose=settings.verbose,
        concurrency=settings.concurrency,
        logger=logger,
    )
    logger.log_metrics_summary()
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="auroractl", description="Summarize pending Aurora job diffs")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--config", help="Key-value config file with default settings")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print the full diff of dirty jobs")
    parser.add_argument("-d", "--debug", action="store_true", help="Debug logging, pass --verbose to aurora")
    parser.add_argument("--cluster", action="append", help="Filter by Aurora clusters (accepted, not applied)")
    parser.add_argument("--role", action="append", help="Filter by Aurora roles (repeatable, comma-separated)")
    parser.add_argument("--env", action="append", help="Filter by Aurora envs (repeatable, comma-separated)")
    parser.add_argument("--job", action="append", help="Filter by Aurora jobs (repeatable, comma-separated)")
    parser.add_argument("--aurora", help="Name of Aurora CLI executable (default: aurora)")
    parser.add_argument("-c", "--concurrency", type=int, help="Max concurrent Aurora CLIs to execute (default: 1)")
    parser.add_argument("--log-dir", help="Also write a daily debug log file to this directory")

    subparsers = parser.add_subparsers(dest="command")
    st = subparsers.add_parser("status", help="Summarize status for all jobs in aurora files")
    st.add_argument("files", nargs="+", metavar="FILE", help="Path to .aurora config file")
    st.set_defaults(func=cmd_status)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    if hasattr(args, "func"):
        return args.func(args)

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
