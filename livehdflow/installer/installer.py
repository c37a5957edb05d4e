# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging
from pathlib import Path
from typing import Optional

import livehdflow.lib.logger as FlowLogger
from livehdflow.installer.config import InstallerConfig
from livehdflow.installer.step import InstallStep
from livehdflow.installer.compiler import Gcc14, CompilerEnvironment, Cpp23Check
from livehdflow.installer.packages import BasicTools, YosysPackage
from livehdflow.installer.bazel import Bazel
from livehdflow.installer.livehd import LiveHD, LiveHDLauncher
from livehdflow.installer.extras import Essent, Gsim

log = logging.getLogger(__name__)


class Installer:
    """
    Installs the toolchain one step at a time, in order. The first failing step stops the run with ``InstallError``.

    :param config: ``InstallerConfig`` shared by all steps
    :param log_file: log file of this run, mentioned in the summary
    """

    def __init__(self, config: InstallerConfig, log_file: Optional[Path] = None):
        self.config = config
        self.log_file = log_file

    def steps(self) -> list[InstallStep]:
        step_types = [Gcc14, CompilerEnvironment, Cpp23Check, BasicTools, Bazel, LiveHD, LiveHDLauncher, YosysPackage]
        if self.config.with_essent:
            step_types.append(Essent)
        if self.config.with_gsim:
            step_types.append(Gsim)
        return [step_type(self.config) for step_type in step_types]

    def run(self):
        for step in self.steps():
            step.run()
        self.summary()

    def summary(self):
        steps = {step.name: step for step in self.steps()}
        FlowLogger.header(log, "Installation Summary")
        FlowLogger.success(log, "Installation completed successfully!")
        log.info("Installed Components:")
        log.info(f"   GCC-14:     {steps['gcc14'].which('g++-14')}")
        log.info(f"   Bazel:      {steps['bazel'].which('bazel') or self.config.bin_dir / 'bazel'}")
        log.info(f"   Yosys:      {steps['yosys'].which('yosys')}")
        log.info(f"   LiveHD:     {self.config.livehd_dir}")
        log.info(f"   Executable: {self.config.lgshell}")
        if "essent" in steps:
            log.info(f"   Essent:     {steps['essent'].jar}")
        if "gsim" in steps:
            log.info(f"   gsim:       {steps['gsim'].binary}")
        if self.log_file is not None:
            log.info(f"Log file saved to: {self.log_file}")
        log.info("Next Steps:")
        if self.config.bashrc is not None:
            log.info(f"   1. Reload your shell: source {self.config.bashrc}")
        log.info("   2. Run LiveHD: livehd")
        log.info("   3. Or convert a file: livehd-setup --convert-only --input your_file.v")
        log.info("Documentation: https://github.com/masc-ucsc/livehd")
