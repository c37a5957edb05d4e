# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import shutil
import logging
from pathlib import Path
from typing import Optional

import livehdflow.lib.logger as FlowLogger
from livehdflow.exceptions import InstallError
from livehdflow.installer.step import InstallStep

log = logging.getLogger(__name__)


class LiveHD(InstallStep):
    """
    Clone and build LiveHD with Bazel.

    Compilers without ``<format>`` get ``core/vcd_reader.cpp`` patched before the build.
    The original file is kept next to it as ``vcd_reader.cpp.backup`` and restored if the build fails.
    """

    name = "livehd"
    title = "Installing LiveHD"

    repo_url = "https://github.com/masc-ucsc/livehd.git"
    build_targets = ["//core/...", "//main:lgshell"]

    @property
    def vcd_reader(self) -> Path:
        return self.config.livehd_dir / "core" / "vcd_reader.cpp"

    def bazelrc(self) -> str:
        return (
            "# Local Bazel configuration for LiveHD\n"
            f"build --action_env=CC={self.config.cc}\n"
            f"build --action_env=CXX={self.config.cxx}\n"
            'build --cxxopt="-std=c++23"\n'
            'build --host_cxxopt="-std=c++23"\n'
            'build --cxxopt="-Wno-error"\n'
            'build --linkopt="-fuse-ld=gold" --incompatible_linkopts_to_linklibs\n'
            "build --local_ram_resources=HOST_RAM*.8\n"
            "build --local_cpu_resources=HOST_CPUS*.8\n"
        )

    def install(self):
        self.clone(self.repo_url, self.config.livehd_dir)
        backup = self.patch_vcd_reader()
        self.write_bazelrc()
        try:
            self.build()
        except InstallError:
            if backup is not None:
                self.restore(backup)
            raise
        FlowLogger.success(log, "LiveHD built successfully!")
        log.info(f"Executable: {self.config.lgshell}")

    def patch_vcd_reader(self) -> Optional[Path]:
        "Strip ``#include <format>`` when the compiler lacks it. Returns the backup path if a patch was applied"
        if self.config.has_format_header is not False or not self.vcd_reader.is_file():
            return None
        FlowLogger.header(log, "Patching vcd_reader.cpp")
        backup = self.vcd_reader.with_name(self.vcd_reader.name + ".backup")
        shutil.copy2(self.vcd_reader, backup)
        lines = self.vcd_reader.read_text().splitlines(keepends=True)
        self.vcd_reader.write_text("".join(line for line in lines if "#include <format>" not in line))
        FlowLogger.success(log, "Patched vcd_reader.cpp (removed <format> include)")
        return backup

    def restore(self, backup: Path):
        "Best effort, a failed restore is logged and the build error still propagates"
        try:
            shutil.copy2(backup, self.vcd_reader)
            log.warning(f"Build failed, restored {self.vcd_reader} from {backup}")
        except OSError as e:
            log.error(f"Could not restore {self.vcd_reader} from {backup}: {e}")

    def write_bazelrc(self):
        log.info("Creating .bazelrc.local with compiler settings...")
        (self.config.livehd_dir / ".bazelrc.local").write_text(self.bazelrc())

    def build(self):
        bazel = self.config.bazel
        log.info("Building LiveHD (this may take 15-30 minutes)...")
        log.info(f"Using bazel: {bazel}")
        log.info(f"Using compilers: CC={self.config.cc}, CXX={self.config.cxx}")
        for target in self.build_targets:
            log.info(f"Building {target}...")
            self.command([bazel, "build", target, "--verbose_failures"], cwd=self.config.livehd_dir)


class LiveHDLauncher(InstallStep):
    "``livehd`` wrapper script that starts lgshell from the LiveHD checkout"

    name = "livehd-launcher"
    title = "Creating Convenience Scripts"

    def script(self) -> str:
        livehd_dir = self.config.livehd_dir
        return (
            "#!/bin/bash\n"
            f'LIVEHD_HOME="{livehd_dir}"\n'
            'if [[ ! -d "$LIVEHD_HOME" ]]; then\n'
            '    echo "Error: LiveHD not found at $LIVEHD_HOME"\n'
            "    exit 1\n"
            "fi\n"
            'cd "$LIVEHD_HOME"\n'
            'exec ./bazel-bin/main/lgshell "$@"\n'
        )

    def install(self):
        self.config.bin_dir.mkdir(parents=True, exist_ok=True)
        launcher = self.config.bin_dir / "livehd"
        launcher.write_text(self.script())
        launcher.chmod(0o755)
        FlowLogger.success(log, f"Convenience script created at {launcher}")
