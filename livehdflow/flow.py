# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import sys
import logging
import argparse
from pathlib import Path
from typing import Optional

import livehdflow.lib.logger as FlowLogger
from livehdflow.artifacts import ConversionArtifacts
from livehdflow.config import RunConfiguration
from livehdflow.converter import Converter
from livehdflow.exceptions import ConfigurationError, FlowError
from livehdflow.installer import Installer, InstallerConfig
from livehdflow.lib.cli_base import CliBase
from livehdflow.lib.toolchain import LgShell, Toolchain, ToolchainError

log = logging.getLogger("livehdflow")  # special case because flow can be a main module

EXAMPLES = """\
EXAMPLES:
  # Full installation and conversion:
  livehd-setup --input /path/to/design.v --output /path/to/output

  # Installation only:
  livehd-setup --install-only

  # Conversion only (after installation):
  livehd-setup --convert-only --input /path/to/design.v --output /path/to/output
"""


class LiveHDFlow(CliBase):
    """
    Installs LiveHD, Yosys and their toolchain, then converts a Verilog design to FIRRTL.

    :param config: ``RunConfiguration``, validated on construction
    :param installer_config: ``InstallerConfig`` for the install stage. Defaults to a default ``InstallerConfig``
    :param toolchain: ``Toolchain`` for the conversion. If none provided, one is located after installation finishes
    :param cl_args: parsed command line, used to locate the toolchain
    :param log_file: log file of this run
    """

    prog = "livehd-setup"
    description = "Complete LiveHD Setup and Conversion Script"
    epilog = EXAMPLES

    def __init__(
        self,
        config: RunConfiguration,
        installer_config: Optional[InstallerConfig] = None,
        toolchain: Optional[Toolchain] = None,
        cl_args: Optional[argparse.Namespace] = None,
        log_file: Optional[Path] = None,
    ):
        self.config = config.validate()
        self.installer_config = installer_config if installer_config is not None else InstallerConfig()
        self._toolchain = toolchain
        self.cl_args = cl_args
        self.log_file = log_file
        self.artifacts: Optional[ConversionArtifacts] = None

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        RunConfiguration.add_arguments(parser)
        InstallerConfig.add_arguments(parser)
        Toolchain.add_arguments(parser)
        FlowLogger.add_arguments(parser)

    @classmethod
    def run_cli(cls, args: Optional[list[str]] = None, **kwargs) -> "LiveHDFlow":
        """
        Main entry point for the command line interface.

        :param args: Command line arguments. Passed to argparse, if not provided, sys.argv is used.
        """
        argv = sys.argv[1:] if args is None else list(args)
        parser = cls.build_parser()
        # --help wins over every other flag, before anything is parsed or validated
        if "--help" in argv or "-h" in argv:
            parser.print_help()
            raise SystemExit(0)
        cl_args = parser.parse_args(argv)

        log_file = FlowLogger.from_clargs(cl_args)
        FlowLogger.header(log, "LiveHD Complete Setup Script")
        log.info(f"Log file: {log_file}")
        log.info(f"{cls.prog} {' '.join(argv)}")

        FlowLogger.header(log, "Validating Arguments")
        try:
            flow = cls(RunConfiguration.from_clargs(cl_args), installer_config=InstallerConfig.from_clargs(cl_args), cl_args=cl_args, log_file=log_file, **kwargs)
        except ConfigurationError:
            parser.print_usage(sys.stderr)
            raise
        flow.run()
        return flow

    @property
    def toolchain(self) -> Toolchain:
        "Tools are located when a stage first needs them, so a fresh install is picked up"
        if self._toolchain is None:
            livehd_dir = self.installer_config.livehd_dir
            if self.cl_args is not None:
                self._toolchain = Toolchain.from_clargs(self.cl_args, livehd_dir=livehd_dir)
            else:
                self._toolchain = Toolchain(lgshell_factory=lambda: LgShell(livehd_dir=livehd_dir))
        return self._toolchain

    def run(self) -> Optional[ConversionArtifacts]:
        "Run the installer and/or the conversion, as selected by the configuration"
        log.info(f"Mode: {self.config.mode}")
        if self.config.runs_installer:
            self.install()
        if self.config.runs_conversion:
            self.artifacts = self.convert()
        FlowLogger.success(log, "All operations completed successfully!")
        return self.artifacts

    def install(self):
        Installer(self.installer_config, log_file=self.log_file).run()

    def convert(self) -> ConversionArtifacts:
        if self.config.input_path is None:
            raise ConfigurationError("Conversion requires an input file")
        return Converter(self.toolchain, self.config.output_dir).run(self.config.input_path)


def main(args: Optional[list[str]] = None) -> int:
    "Run the CLI and turn failures into an exit status"
    try:
        LiveHDFlow.run_cli(args)
    except (FlowError, ToolchainError) as e:
        stage = e.stage if e.stage is not None else "setup"
        log.error(f"Failed at stage '{stage}': {e}")
        return 1
    except KeyboardInterrupt:
        log.error("Interrupted")
        return 130
    finally:
        FlowLogger.close_logger()
    return 0


if __name__ == "__main__":
    sys.exit(main())
