# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging
import argparse
from pathlib import Path
from typing import Callable, Optional

from livehdflow.lib.toolchain.tool import LgShell, Yosys

log = logging.getLogger(__name__)


class Toolchain:
    """
    Manages the external tools used by the conversion pipeline. Allows for easier construction of ``Tool`` objects for library instantiation. Also provides CLI arguments for toolchain components.

    Tools that aren't passed in are located on first use, so a missing executable is reported by the stage that needs it.

    E.g. users overriding just the Yosys binary:

    .. code-block:: python

        toolchain = Toolchain(lgshell=LgShell(livehd_dir=Path.home() / "livehd"), yosys=Yosys(yosys_path=Path("/opt/yosys/bin/yosys")))

    :param lgshell: ``LgShell`` object used for the optimize stage
    :param yosys: ``Yosys`` object used for the convert stage
    :param lgshell_factory: builds the ``LgShell`` when ``lgshell`` isn't provided. Defaults to searching the environment
    :param yosys_factory: builds the ``Yosys`` when ``yosys`` isn't provided. Defaults to searching the environment
    """

    def __init__(
        self,
        lgshell: Optional[LgShell] = None,
        yosys: Optional[Yosys] = None,
        lgshell_factory: Optional[Callable[[], LgShell]] = None,
        yosys_factory: Optional[Callable[[], Yosys]] = None,
    ):
        self._lgshell = lgshell
        self._yosys = yosys
        self._lgshell_factory = lgshell_factory if lgshell_factory is not None else LgShell
        self._yosys_factory = yosys_factory if yosys_factory is not None else Yosys

    @property
    def lgshell(self) -> LgShell:
        if self._lgshell is None:
            self._lgshell = self._lgshell_factory()
        return self._lgshell

    @property
    def yosys(self) -> Yosys:
        if self._yosys is None:
            self._yosys = self._yosys_factory()
        return self._yosys

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        toolchain_parser = parser.add_argument_group("Toolchain", description="Arguments that affect how external tools are run")
        toolchain_parser.add_argument("--tool-timeout", dest="tool_timeout", type=float, default=None, help="Seconds to wait for each external tool before failing. Default waits forever")

        LgShell.add_arguments(parser)
        Yosys.add_arguments(parser)

    @classmethod
    def from_clargs(cls, args: argparse.Namespace, livehd_dir: Optional[Path] = None) -> "Toolchain":
        """
        Create toolchain from command line arguments. Executables are located on first use.
        """
        return cls(
            lgshell_factory=lambda: LgShell.from_clargs(args, livehd_dir=livehd_dir),
            yosys_factory=lambda: Yosys.from_clargs(args),
        )
