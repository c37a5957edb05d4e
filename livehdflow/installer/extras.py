# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import os
import logging
from pathlib import Path

import livehdflow.lib.logger as FlowLogger
from livehdflow.installer.step import InstallStep

log = logging.getLogger(__name__)


class Essent(InstallStep):
    """
    Essent (``repcut`` branch) and its KaHyPar partitioner. sbt comes from SDKMAN.
    """

    name = "essent"
    title = "Installing Essent"

    packages = [
        "build-essential",
        "cmake",
        "git",
        "g++",
        "libtbb-dev",
        "zlib1g-dev",
        "python3",
        "python3-pip",
        "libboost-all-dev",
        "openjdk-17-jdk",
        "wget",
        "curl",
        "unzip",
        "zip",
        "pkg-config",
    ]
    kahypar_url = "https://github.com/kahypar/kahypar.git"
    essent_url = "https://github.com/ucsc-vama/essent.git"

    @property
    def sdkman_init(self) -> Path:
        return Path.home() / ".sdkman" / "bin" / "sdkman-init.sh"

    @property
    def kahypar_dir(self) -> Path:
        return self.config.extras_dir / "kahypar"

    @property
    def essent_dir(self) -> Path:
        return self.config.extras_dir / "essent"

    @property
    def jar(self) -> Path:
        return self.essent_dir / "utils" / "bin" / "essent.jar"

    def is_satisfied(self) -> bool:
        return self.jar.is_file()

    def install(self):
        self.config.extras_dir.mkdir(parents=True, exist_ok=True)
        self.apt_update()
        self.apt_install(self.packages)
        self.install_sbt()
        self.install_kahypar()
        self.clone(self.essent_url, self.essent_dir, ["-b", "repcut"])
        self.shell(f'source "{self.sdkman_init}" && sbt assembly', cwd=self.essent_dir)
        FlowLogger.success(log, f"Essent built: {self.jar}")
        log.info(f"To run essent use the command: java -jar {self.jar} -O0 --parallel <partitions> fir_path")

    def install_sbt(self):
        if not self.sdkman_init.exists():
            self.shell('curl -s "https://get.sdkman.io" | bash')
        # sdk exits non-zero when sbt is already installed
        self.shell(f'source "{self.sdkman_init}" && sdk install sbt', check=False)

    def install_kahypar(self):
        self.clone(self.kahypar_url, self.kahypar_dir)
        self.command(["git", "submodule", "update", "--init", "--recursive"], cwd=self.kahypar_dir)
        build_dir = self.kahypar_dir / "build"
        build_dir.mkdir(exist_ok=True)
        self.command(["cmake", "..", "-DCMAKE_BUILD_TYPE=Release", "-DKAHYPAR_BUILD_TESTS=OFF", "-DKAHYPAR_USE_PYTHON=OFF"], cwd=build_dir)
        self.command(["make", f"-j{os.cpu_count() or 1}"], cwd=build_dir)
        self.command(["make", "install"], cwd=build_dir, sudo=True)
        self.command(["ldconfig"], sudo=True)
        self.command(["cp", build_dir / "kahypar" / "application" / "KaHyPar", "/usr/local/bin/kahypar"], sudo=True)
        self.require("kahypar")


class Gsim(InstallStep):
    "gsim, built with clang-19"

    name = "gsim"
    title = "Installing gsim"

    packages = ["flex", "bison", "git", "make", "libgmp-dev", "bzip2", "time", "clang-19", "lld-19"]
    repo_url = "https://github.com/OpenXiangShan/gsim.git"
    ready_to_run_url = "https://github.com/jaypiper/gsim-ready-to-run.git"

    @property
    def gsim_dir(self) -> Path:
        return self.config.extras_dir / "gsim"

    @property
    def binary(self) -> Path:
        return self.gsim_dir / "build" / "gsim" / "gsim"

    def is_satisfied(self) -> bool:
        return self.binary.is_file()

    def install(self):
        self.config.extras_dir.mkdir(parents=True, exist_ok=True)
        self.command(["apt-get", "update"], sudo=True)
        self.command(["apt-get", "install", "-y"] + self.packages, sudo=True)
        self.clone(self.repo_url, self.gsim_dir, ["--recursive", "--config", f"submodule.ready-to-run.url={self.ready_to_run_url}"])

        env = self.config.environ(CC="clang-19", CXX="clang++-19")
        self.command(["make", "build-gsim"], cwd=self.gsim_dir, env=env)
        self.command(["make", "STATIC=1", "build-gsim"], cwd=self.gsim_dir, env=env)
        self.command(["make", "init"], cwd=self.gsim_dir, env=env)
        self.command([self.binary, "--help"], cwd=self.gsim_dir, env=env)
        FlowLogger.success(log, f"gsim built: {self.binary}")
        log.info(f"To run using any design-core run the command: make -C {self.gsim_dir} run dutName=rocket")
