# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import os
import argparse
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field


def _default_sudo() -> list[str]:
    return [] if os.geteuid() == 0 else ["sudo"]


@dataclass
class InstallerConfig:
    """
    Settings shared by every installer step. Steps read compiler selection and PATH from here
    instead of exporting them into the running process.

    :param livehd_dir: LiveHD checkout, cloned if missing
    :param cc: C compiler used for the LiveHD build
    :param cxx: C++ compiler used for the LiveHD build
    :param bin_dir: user bin directory for Bazel and the ``livehd`` launcher
    :param bashrc: shell rc file that receives compiler and PATH settings. ``None`` leaves shell config alone
    :param bazel_version: Bazel release to install
    :param extras_dir: where optional tools (Essent, gsim) are cloned
    :param with_essent: also build Essent and KaHyPar
    :param with_gsim: also build gsim
    :param sudo: prefix for commands that need root
    :param has_format_header: set by the C++23 check; ``None`` until it runs
    """

    livehd_dir: Path = field(default_factory=lambda: Path.home() / "livehd")
    cc: Path = Path("/usr/bin/gcc-14")
    cxx: Path = Path("/usr/bin/g++-14")
    bin_dir: Path = field(default_factory=lambda: Path.home() / "bin")
    bashrc: Optional[Path] = field(default_factory=lambda: Path.home() / ".bashrc")
    bazel_version: str = "8.4.1"
    extras_dir: Path = field(default_factory=Path.home)
    with_essent: bool = False
    with_gsim: bool = False
    sudo: list[str] = field(default_factory=_default_sudo)
    has_format_header: Optional[bool] = None

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        installer_parser = parser.add_argument_group("Installer", description="Arguments that affect installation")
        # fmt: off
        installer_parser.add_argument("--livehd-dir", dest="livehd_dir", type=Path, default=Path.home() / "livehd", help="LiveHD checkout. Default: %(default)s")
        installer_parser.add_argument("--cc", type=Path, default=Path("/usr/bin/gcc-14"), help="C compiler for the LiveHD build. Default: %(default)s")
        installer_parser.add_argument("--cxx", type=Path, default=Path("/usr/bin/g++-14"), help="C++ compiler for the LiveHD build. Default: %(default)s")
        installer_parser.add_argument("--bin-dir", dest="bin_dir", type=Path, default=Path.home() / "bin", help="Directory for Bazel and the livehd launcher. Default: %(default)s")
        installer_parser.add_argument("--no-bashrc", dest="patch_bashrc", action="store_false", default=True, help="Do not add compiler and PATH settings to ~/.bashrc")
        installer_parser.add_argument("--bazel-version", dest="bazel_version", type=str, default="8.4.1", help="Bazel release to install. Default: %(default)s")
        installer_parser.add_argument("--extras-dir", dest="extras_dir", type=Path, default=Path.home(), help="Where optional tools are cloned. Default: %(default)s")
        installer_parser.add_argument("--with-essent", dest="with_essent", action="store_true", default=False, help="Also build Essent (with KaHyPar and sbt)")
        installer_parser.add_argument("--with-gsim", dest="with_gsim", action="store_true", default=False, help="Also build gsim")
        # fmt: on

    @classmethod
    def from_clargs(cls, args: argparse.Namespace) -> "InstallerConfig":
        return cls(
            livehd_dir=args.livehd_dir,
            cc=args.cc,
            cxx=args.cxx,
            bin_dir=args.bin_dir,
            bashrc=Path.home() / ".bashrc" if args.patch_bashrc else None,
            bazel_version=args.bazel_version,
            extras_dir=args.extras_dir,
            with_essent=args.with_essent,
            with_gsim=args.with_gsim,
        )

    @property
    def lgshell(self) -> Path:
        return self.livehd_dir / "bazel-bin" / "main" / "lgshell"

    @property
    def bazel(self) -> Path:
        "Bazel installed by the bazel step, falling back to whatever is on PATH"
        user_bazel = self.bin_dir / "bazel"
        return user_bazel if user_bazel.exists() else Path("bazel")

    def environ(self, **overrides: str) -> dict[str, str]:
        "Environment for installer subprocesses"
        env = os.environ.copy()
        env["CC"] = str(self.cc)
        env["CXX"] = str(self.cxx)
        path = env.get("PATH", "")
        if str(self.bin_dir) not in path.split(os.pathsep):
            env["PATH"] = os.pathsep.join(p for p in [path, str(self.bin_dir)] if p)
        env.update(overrides)
        return env
