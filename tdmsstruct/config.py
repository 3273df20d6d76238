# tdmsstruct/config.py
from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
import os
from typing import Sequence

from tdmsstruct.core.exceptions import ConfigError


PROG = "tdms-dump-structure"

DEFAULT_SUFFIXES = {
    "xml": ".structure.xml",
    "json": ".structure.json",
}
FORMATS = tuple(DEFAULT_SUFFIXES)


def default_output_path(input_path: str | os.PathLike, fmt: str = "xml") -> str:
    """Report path used when none is given: the input path plus a fixed suffix."""
    if fmt not in DEFAULT_SUFFIXES:
        raise ConfigError(f"Unknown report format '{fmt}', expected one of {FORMATS}")
    return os.fspath(input_path) + DEFAULT_SUFFIXES[fmt]


@dataclass(frozen=True, slots=True)
class DumpConfig:
    """
    Settings of one structure dump run.

    - input_path: TDMS file to decode
    - output_path: report file; defaults to input_path + format suffix
    - fmt: report format, "xml" or "json"
    - log_level: level for the tdmsstruct loggers
    """
    input_path: str
    output_path: str | None = None
    fmt: str = "xml"
    log_level: int = logging.WARNING

    def __post_init__(self) -> None:
        if not isinstance(self.input_path, (str, os.PathLike)) or not os.fspath(self.input_path).strip():
            raise ConfigError("DumpConfig.input_path must be a non-empty path.")
        if self.fmt not in DEFAULT_SUFFIXES:
            raise ConfigError(f"DumpConfig.fmt must be one of {FORMATS}, got '{self.fmt}'.")
        if not isinstance(self.log_level, int):
            raise ConfigError("DumpConfig.log_level must be a logging level (int).")

        object.__setattr__(self, "input_path", os.fspath(self.input_path))
        if self.output_path is None:
            object.__setattr__(self, "output_path", default_output_path(self.input_path, self.fmt))
        else:
            object.__setattr__(self, "output_path", os.fspath(self.output_path))

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> "DumpConfig":
        """Build a config from command line arguments.

        Missing the input path makes argparse print the usage and exit with 2.
        """
        args = build_parser().parse_args(argv)
        return cls(
            input_path=args.tdms_file,
            output_path=args.output_file,
            fmt=args.format,
            log_level=logging.DEBUG if args.debug else logging.WARNING,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Write the internal structure of an NI TDMS file into a human readable report.",
    )
    parser.add_argument(
        "tdms_file", metavar="TDMSFILEPATH",
        help="TDMS file to analyze.")
    parser.add_argument(
        "output_file", metavar="OUTPUTPATH", nargs="?", default=None,
        help="Report file to write (default: TDMSFILEPATH + '.structure.xml').")
    parser.add_argument(
        "-f", "--format", choices=FORMATS, default="xml",
        help="Report format.")
    parser.add_argument(
        "-d", "--debug", action="store_true",
        help="Print debugging information to stderr.")
    return parser
