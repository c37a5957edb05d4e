# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging
import argparse
from enum import Enum, auto
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, replace

from livehdflow.exceptions import ConfigurationError, MissingFileError

log = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = Path("/workspace/livehd_examples/out")


class RunMode(Enum):
    INSTALL_ONLY = auto()
    CONVERT_ONLY = auto()
    INSTALL_AND_CONVERT = auto()

    def __str__(self):
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class RunConfiguration:
    """
    What a run should do. Built once from the command line; :meth:`validate` returns the resolved configuration.

    :param install_only: only run the installer
    :param convert_only: only run the conversion pipeline, requires ``input_path``
    :param input_path: Verilog design to convert
    :param output_dir: directory that receives the optimized Verilog and the FIRRTL output
    """

    install_only: bool = False
    convert_only: bool = False
    input_path: Optional[Path] = None
    output_dir: Path = DEFAULT_OUTPUT_DIR

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        run_args = parser.add_argument_group("Run Control", "Select which parts of the flow run")
        run_args.add_argument("--install-only", dest="install_only", action="store_true", default=False, help="Only install dependencies and LiveHD (skip conversion)")
        run_args.add_argument("--convert-only", dest="convert_only", action="store_true", default=False, help="Only run conversion (requires --input)")
        run_args.add_argument("--input", dest="input", type=str, default=None, metavar="FILE", help="Input Verilog file for conversion")
        run_args.add_argument("--output", dest="output", type=Path, default=DEFAULT_OUTPUT_DIR, metavar="DIR", help="Output directory. Default: %(default)s")

    @classmethod
    def from_clargs(cls, args: argparse.Namespace) -> "RunConfiguration":
        return cls(
            install_only=args.install_only,
            convert_only=args.convert_only,
            input_path=Path(args.input) if args.input else None,
            output_dir=args.output,
        )

    def validate(self) -> "RunConfiguration":
        """
        Pre-flight checks. Performs no side effects beyond logging.

        With no mode flag and no input the run falls back to install-only with a warning.

        :raises ConfigurationError: if the mode flags conflict or ``--convert-only`` has no input
        :raises MissingFileError: if ``--convert-only`` is given an input that doesn't exist
        :returns: the resolved configuration
        """
        if self.install_only and self.convert_only:
            raise ConfigurationError("Cannot use --install-only and --convert-only together")

        if self.convert_only:
            if self.input_path is None:
                raise ConfigurationError("Conversion mode requires --input argument")
            if not self.input_path.is_file():
                raise MissingFileError(self.input_path, "Input file", stage="validate")
            log.info("Conversion mode validated")
        elif not self.install_only and self.input_path is None:
            log.warning("No input file specified. Will only perform installation.")
            return replace(self, install_only=True)

        if self.input_path is not None:
            log.info(f"Input file: {self.input_path}")
            log.info(f"Output directory: {self.output_dir}")
        return self

    @property
    def mode(self) -> RunMode:
        "Mode of a validated configuration"
        if self.convert_only:
            return RunMode.CONVERT_ONLY
        if self.install_only or self.input_path is None:
            return RunMode.INSTALL_ONLY
        return RunMode.INSTALL_AND_CONVERT

    @property
    def runs_installer(self) -> bool:
        return self.mode in (RunMode.INSTALL_ONLY, RunMode.INSTALL_AND_CONVERT)

    @property
    def runs_conversion(self) -> bool:
        return self.mode in (RunMode.CONVERT_ONLY, RunMode.INSTALL_AND_CONVERT)
