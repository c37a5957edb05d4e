# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0
from .config import InstallerConfig
from .step import InstallStep
from .installer import Installer

__all__ = ("InstallerConfig", "InstallStep", "Installer")
