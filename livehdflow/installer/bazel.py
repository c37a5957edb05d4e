# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import re
import logging
import tempfile
from pathlib import Path
from typing import Optional

import livehdflow.lib.logger as FlowLogger
from livehdflow.exceptions import InstallError
from livehdflow.installer.step import InstallStep

log = logging.getLogger(__name__)

VERSION_RE = re.compile(r"(\d+\.\d+\.\d+)")


class Bazel(InstallStep):
    "Bazel from the official release installer, installed for the current user"

    name = "bazel"
    title = "Installing Bazel"

    release_url = "https://github.com/bazelbuild/bazel/releases/download/{version}/{installer}"

    @property
    def installer_name(self) -> str:
        return f"bazel-{self.config.bazel_version}-installer-linux-x86_64.sh"

    def installed_version(self) -> Optional[str]:
        output = self.query([self.config.bazel, "--version"])
        if output is None:
            return None
        match = VERSION_RE.search(output)
        return match.group(1) if match else None

    def is_satisfied(self) -> bool:
        current = self.installed_version()
        if current is None:
            return False
        if current == self.config.bazel_version:
            return True
        log.warning(f"Found Bazel {current}, installing {self.config.bazel_version}")
        return False

    def install(self):
        version = self.config.bazel_version
        url = self.release_url.format(version=version, installer=self.installer_name)
        with tempfile.TemporaryDirectory(prefix="bazel_install_") as tmp:
            installer = Path(tmp) / self.installer_name
            log.info(f"Downloading Bazel {version}...")
            self.command(["wget", "-q", "-O", installer, url])
            installer.chmod(0o755)
            log.info("Installing Bazel...")
            self.command([installer, "--user", f"--bin={self.config.bin_dir}"])

        self.append_to_bashrc(f'export PATH="$PATH:{self.config.bin_dir}"', f'export PATH="$PATH:{self.config.bin_dir}"\n')

        log.info("Verifying Bazel installation...")
        installed = self.installed_version()
        if installed != version:
            raise InstallError(f"Expected Bazel {version} after install, found {installed}", step=self.name)
        FlowLogger.success(log, f"Bazel {version} installed successfully")
