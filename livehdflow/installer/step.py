# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import shutil
import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import livehdflow.lib.logger as FlowLogger
from livehdflow.exceptions import InstallError
from livehdflow.installer.config import InstallerConfig

log = logging.getLogger(__name__)


class InstallStep(ABC):
    """
    One installation step. A step is either already satisfied and skipped, or runs its commands.
    Any failing command raises ``InstallError`` and nothing is rolled back.

    Subclasses set ``name`` and ``title`` and implement :meth:`install`.

    :param config: ``InstallerConfig`` shared by all steps
    """

    name = "step"
    title = "Install step"

    def __init__(self, config: InstallerConfig):
        self.config = config

    def is_satisfied(self) -> bool:
        "Return True if the step has nothing to do"
        return False

    @abstractmethod
    def install(self):
        pass

    def run(self):
        FlowLogger.header(log, self.title)
        if self.is_satisfied():
            FlowLogger.success(log, f"{self.name}: already installed, skipping")
            return
        self.install()

    def command(self, cmd: list, cwd: Optional[Path] = None, sudo: bool = False, check: bool = True, env: Optional[dict] = None) -> int:
        """
        Run ``cmd`` to completion, streaming its output into the log.

        :param cmd: command and arguments
        :param cwd: working directory
        :param sudo: prefix the command with the configured sudo command
        :param check: raise ``InstallError`` on a non-zero exit
        :param env: environment, defaults to :meth:`InstallerConfig.environ`
        :returns: exit status
        """
        if sudo:
            cmd = self.config.sudo + cmd
        cmd = [str(c) for c in cmd]
        log.info(f"Running {' '.join(cmd)}")
        out_log = logging.getLogger(f"{__name__}.{self.name}")
        try:
            with subprocess.Popen(cmd, cwd=cwd, env=env or self.config.environ(), stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True) as process:
                for line in process.stdout:
                    out_log.info(line.rstrip())
        except OSError as e:
            raise InstallError(f"Could not run {cmd[0]}: {e}", step=self.name, cmd=cmd) from e
        if check and process.returncode != 0:
            raise InstallError("Command failed", step=self.name, cmd=cmd, returncode=process.returncode)
        if process.returncode != 0:
            log.warning(f"Ignoring exit status {process.returncode} from {cmd[0]}")
        return process.returncode

    def shell(self, script: str, cwd: Optional[Path] = None, check: bool = True) -> int:
        "Run ``script`` with bash, for commands that need shell state such as ``source``"
        return self.command(["bash", "-c", script], cwd=cwd, check=check)

    def query(self, cmd: list) -> Optional[str]:
        "Output of a short informational command, ``None`` if it can't be run or fails"
        try:
            process = subprocess.run([str(c) for c in cmd], stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, env=self.config.environ(), timeout=60)
        except (OSError, subprocess.TimeoutExpired):
            return None
        if process.returncode != 0:
            return None
        return process.stdout

    def apt_install(self, packages: list[str]):
        self.command(["apt", "install", "-y"] + packages, sudo=True)

    def apt_update(self):
        self.command(["apt", "update"], sudo=True)

    def clone(self, url: str, dest: Path, extra_args: Optional[list] = None):
        "Clone ``url`` into ``dest`` unless it already exists"
        if dest.exists():
            log.warning(f"{dest} already exists, using existing checkout")
            return
        log.info(f"Cloning {url} into {dest}")
        self.command(["git", "clone"] + (extra_args or []) + [url, dest])

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool, path=self.config.environ()["PATH"])

    def require(self, tool: str):
        "Raise ``InstallError`` unless ``tool`` is now on PATH"
        location = self.which(tool)
        if location is None:
            raise InstallError(f"{tool} installation failed, not found on PATH", step=self.name)
        FlowLogger.success(log, f"{tool} installed at: {location}")

    def append_to_bashrc(self, marker: str, block: str):
        "Append ``block`` to the configured rc file unless ``marker`` is already in it"
        bashrc = self.config.bashrc
        if bashrc is None:
            log.info("Shell rc updates disabled, skipping")
            return
        existing = bashrc.read_text() if bashrc.exists() else ""
        if marker in existing:
            log.info(f"Settings already in {bashrc}")
            return
        log.info(f"Adding settings to {bashrc}")
        with bashrc.open("a") as f:
            f.write(block)
        FlowLogger.success(log, f"Settings added to {bashrc}")
