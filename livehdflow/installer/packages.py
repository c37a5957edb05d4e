# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging

from livehdflow.installer.step import InstallStep

log = logging.getLogger(__name__)


class BasicTools(InstallStep):
    name = "basic-tools"
    title = "Installing Basic Development Tools"

    packages = [
        "git",
        "curl",
        "wget",
        "python3",
        "python3-pip",
        "unzip",
        "pkg-config",
        "build-essential",
    ]

    def install(self):
        self.apt_update()
        log.info("Installing essential tools...")
        self.apt_install(self.packages)


class YosysPackage(InstallStep):
    name = "yosys"
    title = "Installing Yosys"

    def is_satisfied(self) -> bool:
        if self.which("yosys") is None:
            return False
        version = self.query(["yosys", "-V"])
        if version:
            log.info(version.splitlines()[0])
        return True

    def install(self):
        log.info("Installing Yosys via apt...")
        self.apt_install(["yosys"])
        self.require("yosys")
