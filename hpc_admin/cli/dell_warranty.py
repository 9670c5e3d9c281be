#!/usr/bin/env python3
"""
Dell service tag warranty lookup.

Queries the Dell support site for the model and remaining warranty days of
a service tag, or of every tag listed in --file (one "HOSTNAME SERVICE_TAG"
pair per line).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

from .. import __version__
from ..collectors.base import CollectorError
from ..collectors.dell import DellWarrantyCollector
from .config import Config, ConfigError

OUTPUT_SEPARATORS = {"csv": ",", "tab": "\t"}
DELIMITED_FIELDS = ["hostname", "model", "service_tag", "warranty_exp_days"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="query-dell-st",
        description=(
            "Query the Dell support site for warranty status and model number of a "
            "given service tag (or list of service tags as provided in --file)."
        ),
    )
    parser.add_argument("-s", "--svctag", help="Dell service tag")
    parser.add_argument("-n", "--host", default="unknown", help="Host name (default: unknown)")
    parser.add_argument("-f", "--file", type=Path,
                        help="Input file, one entry per line: HOSTNAME SERVICE_TAG")
    parser.add_argument("--format", type=str.lower,
                        help="Alter default output using one of these formats: tab, csv")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--timeout", type=int, help="Network timeout in seconds")
    parser.add_argument("--ca-bundle", default=None, help="Path to a custom CA bundle PEM")
    parser.add_argument("--insecure", action="store_true", default=None,
                        help="Disable TLS certificate verification (NOT recommended)")
    parser.add_argument("--debug", action="store_true", help="Additional debug output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def read_node_file(path: Path) -> List[Dict[str, str]]:
    """Read 'HOSTNAME SERVICE_TAG' lines; blank lines are skipped."""
    nodes = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            parts = line.split()
            if not parts:
                continue
            host = parts[0]
            tag = parts[1] if len(parts) > 1 else "NA"
            nodes.append({"hostname": host, "svc_tag": tag})
    return nodes


def format_node(node: Dict[str, str], index: int, sep: Optional[str]) -> List[str]:
    """Render one node as output lines; delimited output gets a header first."""
    if sep is None:
        return [
            f"Host: {node['hostname']}",
            f"\tModel: {node['model']}",
            f"\tService Tag: {node['svc_tag']}",
            f"\tWarranty Exp: {node['warranty_exp']} days left",
        ]

    lines = []
    if index == 0:
        lines.append(sep.join(DELIMITED_FIELDS))
    lines.append(sep.join([node["hostname"], node["model"], node["svc_tag"], node["warranty_exp"]]))
    return lines


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    sep = None
    if args.format is not None:
        if args.format not in OUTPUT_SEPARATORS:
            parser.error("Invalid output format specified, see --help for valid options")
        sep = OUTPUT_SEPARATORS[args.format]

    if args.file is None:
        if args.svctag is None:
            parser.error("Mandatory argument --svctag is missing, see --help for details")
        nodes = [{"hostname": args.host, "svc_tag": args.svctag}]
    else:
        if not args.file.exists():
            parser.error(f"Input file not found: {args.file}")
        try:
            nodes = read_node_file(args.file)
        except (OSError, UnicodeDecodeError) as e:
            parser.error(f"Cannot read input file {args.file}: {e}")

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        parser.error(str(e))

    dell = config.dell
    collector = DellWarrantyCollector(
        url=dell.url,
        timeout=args.timeout if args.timeout is not None else dell.timeout,
        insecure=args.insecure if args.insecure is not None else dell.insecure,
        ca_bundle=args.ca_bundle or dell.ca_bundle,
        user_agent=dell.user_agent,
        debug=args.debug,
    )
    collector.trace(f"Nodes: {nodes}")

    failures = 0
    printed = 0
    try:
        for node in nodes:
            try:
                info = collector.collect(node["svc_tag"])
            except CollectorError as e:
                sys.stderr.write(f"Error: {node['hostname']}: {e}\n")
                failures += 1
                continue
            node.update(info)
            for line in format_node(node, printed, sep):
                print(line)
            printed += 1
    finally:
        collector.close()

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
