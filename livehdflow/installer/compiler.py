# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging
import tempfile
from pathlib import Path

import livehdflow.lib.logger as FlowLogger
from livehdflow.installer.step import InstallStep

log = logging.getLogger(__name__)

CPP23_PROBE = """\
#include <iostream>
#include <format>
int main() {
    std::string msg = std::format("C++23 with <format> supported");
    std::cout << msg << std::endl;
    return 0;
}
"""


class Gcc14(InstallStep):
    "GCC-14 from the ubuntu-toolchain-r PPA"

    name = "gcc14"
    title = "Installing GCC-14 and G++-14"

    def is_satisfied(self) -> bool:
        return self.which("g++-14") is not None and self.which("gcc-14") is not None

    def install(self):
        log.info("Adding Ubuntu toolchain PPA repository...")
        self.command(["add-apt-repository", "ppa:ubuntu-toolchain-r/test", "-y"], sudo=True)
        self.apt_update()
        self.apt_install(["g++-14", "gcc-14"])
        self.require("g++-14")
        version = self.query(["g++-14", "--version"])
        if version:
            log.info(version.splitlines()[0])


class CompilerEnvironment(InstallStep):
    "Record the compiler selection in the user's shell rc file"

    name = "compiler-environment"
    title = "Setting Up Compiler Environment"

    def install(self):
        log.info(f"CXX={self.config.cxx}")
        log.info(f"CC={self.config.cc}")
        cxx_name = self.config.cxx.name
        cc_name = self.config.cc.name
        block = (
            "\n# GCC-14 Compiler Settings\n"
            f"export CXX={self.config.cxx}\n"
            f"export CC={self.config.cc}\n"
            f'alias g++="{cxx_name}"\n'
            f'alias gcc="{cc_name}"\n'
        )
        self.append_to_bashrc(f"export CXX={self.config.cxx}", block)


class Cpp23Check(InstallStep):
    """
    Check whether the C++ compiler ships ``<format>``. The result is stored in ``config.has_format_header``
    and decides whether LiveHD sources get patched. Never fails the install.
    """

    name = "cpp23-check"
    title = "Verifying C++23 Support"

    def install(self):
        log.info("Testing C++23 compilation with <format> header...")
        with tempfile.TemporaryDirectory(prefix="cpp23_check_") as tmp:
            source = Path(tmp) / "cpp23_test.cpp"
            binary = Path(tmp) / "cpp23_test"
            source.write_text(CPP23_PROBE)
            compiled = self.query([self.config.cxx, "-std=c++23", source, "-o", binary]) is not None

        self.config.has_format_header = compiled
        if compiled:
            FlowLogger.success(log, "C++23 with <format> header verified")
        else:
            log.warning("<format> header NOT available")
            log.warning("This may cause build issues - will attempt to patch")
