#!/usr/bin/env python3
"""Generate a random password of the requested length."""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .. import __version__
from ..passwords import rand_passwd
from .config import Config, ConfigError


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="rand-passwd", description="Generates a random password")
    parser.add_argument("-l", "--length", type=int,
                        help="Number of characters to use for password (default: 10)")
    parser.add_argument("-c", "--count", type=int, default=1, help="Number of passwords to print")
    parser.add_argument("--config", help="Path to a YAML config file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)

    try:
        config = Config.load(args.config)
    except ConfigError as e:
        parser.error(str(e))

    length = args.length if args.length is not None else config.passwords.length
    for _ in range(max(1, args.count)):
        print(rand_passwd(length))
    return 0


if __name__ == "__main__":
    sys.exit(main())
