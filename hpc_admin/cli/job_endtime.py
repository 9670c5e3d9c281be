#!/usr/bin/env python3
"""
Grid Engine job end-time report.

Queries Grid Engine by job id (or by user) and prints, in human form, the
absolute end time of every running task based on the hard runtime request
(h_rt).

SGE does not report the start time in `qstat -j`, so each job costs two
qstat calls: `qstat -j JOB -xml` for the owner and h_rt, then
`qstat -u OWNER -s r` for the running tasks and their start times.

Output formats: table (default), csv, tab, json.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .. import __version__
from ..collectors.gridengine import GridEngineCollector
from ..data.formatting import render_delimited, render_json, render_table
from ..resolver import JobResolver, expand_job_ids
from .config import Config, ConfigError

OUTPUT_SEPARATORS = {"csv": ",", "tab": "\t"}


def comma_list(value: str) -> List[str]:
    """argparse type for 'a,b,c' arguments."""
    return [item.strip() for item in value.split(",") if item.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="query-job-endtime",
        description=(
            "Query Grid Engine by job id or user and print, in human form, the "
            "absolute end time of each running task based on the hard runtime "
            "request (h_rt)."
        ),
    )
    parser.add_argument("-j", "--jobid", type=comma_list, action="extend", default=[],
                        help="Comma separated list of Grid Engine job ids to query")
    parser.add_argument("-u", "--userid", type=comma_list, action="extend", default=[],
                        help="Comma separated list of Grid Engine user ids to query")
    parser.add_argument("--format", choices=["table", "csv", "tab", "json"], default="table",
                        help="Output format (default: table)")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--timeout", type=int, help="Timeout in seconds for each qstat call")
    parser.add_argument("--debug", action="store_true",
                        help="Display additional output like internal structures")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_collector(config: Config, debug: bool = False) -> GridEngineCollector:
    ge = config.gridengine
    return GridEngineCollector(
        qstat=ge.qstat,
        timeout=ge.timeout,
        max_retries=ge.max_retries,
        retry_delay=ge.retry_delay,
        debug=debug,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.jobid and not args.userid:
        parser.error("at least one of --jobid or --userid is required")

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        parser.error(str(e))
    if args.timeout is not None:
        config.gridengine.timeout = args.timeout

    collector = build_collector(config, debug=args.debug)

    job_ids, user_failures = expand_job_ids(
        collector, args.jobid, args.userid, debug=args.debug, log=collector.log
    )
    for user, error in user_failures.items():
        sys.stderr.write(f"Error: could not list jobs for user {user}: {error}\n")

    resolver = JobResolver(
        collector,
        runtime_resource=config.gridengine.runtime_resource,
        debug=args.debug,
        log=collector.log,
    )
    results = resolver.resolve_all(job_ids)

    failed = [r for r in results if r.error is not None]
    for result in failed:
        sys.stderr.write(f"Error: job {result.job_id}: {result.error}\n")

    if args.format == "json":
        print(render_json(results))
    elif args.format in OUTPUT_SEPARATORS:
        sys.stdout.write(render_delimited(results, OUTPUT_SEPARATORS[args.format]))
    else:
        for line in render_table(results):
            print(line)

    return 1 if failed or user_failures else 0


if __name__ == "__main__":
    sys.exit(main())
