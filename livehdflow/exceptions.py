# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

from pathlib import Path
from typing import Optional


class FlowError(Exception):
    """
    Base class for fatal errors raised by the installer and the conversion pipeline.

    :param message: description of the failure
    :param stage: name of the stage or step that failed, if known
    """

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self):
        if self.stage is not None:
            return f"[{self.stage}] {self.message}"
        return self.message


class ConfigurationError(FlowError):
    "Conflicting or missing command line options. Raised before any side effect"

    def __init__(self, message: str):
        super().__init__(message, stage="validate")


class MissingFileError(FlowError):
    """
    A required file is absent: the input design, or an artifact a stage should have produced.

    :param path: the missing path
    :param description: what the file is, e.g. "Optimized Verilog"
    """

    def __init__(self, path: Path, description: str, stage: Optional[str] = None):
        super().__init__(f"{description} not found: {path}", stage=stage)
        self.path = path
        self.description = description


class InstallError(FlowError):
    """
    An installer step failed.

    :param step: name of the failing step
    :param cmd: command that failed, if the failure came from a command
    :param returncode: exit status of ``cmd``
    """

    def __init__(self, message: str, step: str, cmd: Optional[list] = None, returncode: Optional[int] = None):
        super().__init__(message, stage=step)
        self.cmd = cmd
        self.returncode = returncode

    def __str__(self):
        err = super().__str__()
        if self.cmd is not None:
            err += f"\n\tran: {' '.join(str(c) for c in self.cmd)}"
        if self.returncode is not None:
            err += f"\n\texit status: {self.returncode}"
        return err
