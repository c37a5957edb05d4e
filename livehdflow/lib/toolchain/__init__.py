# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0
from .tool import Tool
from .tool import LgShell
from .tool import Yosys
from .exceptions import ToolFailureType, ToolchainError
from .toolchain import Toolchain

__all__ = ("Tool", "LgShell", "Yosys", "ToolFailureType", "ToolchainError", "Toolchain")
