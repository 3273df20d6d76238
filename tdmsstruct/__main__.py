from __future__ import annotations

import logging
import sys
from typing import Sequence

from tdmsstruct.config import DumpConfig, build_parser
from tdmsstruct.core.exceptions import ConfigError, TdmsError
from tdmsstruct.io.load import dump_with_config


EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2  # same code argparse uses for a missing argument


def main(argv: Sequence[str] | None = None) -> int:
    try:
        config = DumpConfig.from_args(argv)
    except ConfigError as e:
        build_parser().print_usage(sys.stderr)
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("tdmsstruct").setLevel(config.log_level)

    try:
        dump_with_config(config)
    except (TdmsError, OSError) as e:
        print(f"EXCEPTION: {e}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
