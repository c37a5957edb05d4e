# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

from enum import Enum, auto
from typing import Optional
from dataclasses import dataclass


class ToolFailureType(Enum):
    OK = auto()
    NOT_FOUND = auto()
    LAUNCH_FAILURE = auto()
    TIMEOUT = auto()
    SEGFAULT = auto()
    NONZERO_EXIT = auto()  # Worst case, don't know what happened


@dataclass
class ToolchainError(Exception):
    """
    ToolchainError raised when a tool fails to run.
    Consumed by the conversion pipeline, which tags it with the failing stage, and by unit tests to check for expected failures.

    :param tool_name: name of the tool that failed to run
    :type tool_name: str
    :param cmd: command that failed to run
    :type cmd: list[str]
    :param kind: type of failure
    :type kind: ToolFailureType
    :param returncode: return code of the tool, -1 if the tool never ran to completion
    :type returncode: int
    :param stage: name of the pipeline stage the tool was running for, if any
    :type stage: Optional[str]
    :param error_text: tool output or error description
    :type error_text: Optional[str]
    """

    tool_name: str
    cmd: list
    kind: ToolFailureType
    returncode: int
    stage: Optional[str] = None
    error_text: Optional[str] = None

    def __str__(self):
        "Set error message based on failure type"
        err = f"{self.tool_name} Failed"
        if self.stage is not None:
            err += f" during {self.stage} stage"
        err += ": "
        err += f"\n\tran: {' '.join(str(c) for c in self.cmd)}\n"
        if self.kind == ToolFailureType.OK:
            err += "OK"
        elif self.kind == ToolFailureType.NOT_FOUND:
            err += "Executable not found"
            err += f"\n{self.error_text}"
        elif self.kind == ToolFailureType.LAUNCH_FAILURE:
            err += "Could not launch executable"
            err += f"\n{self.error_text}"
        elif self.kind == ToolFailureType.TIMEOUT:
            err += "Timed out"
            err += f"\n{self.error_text}"
        elif self.kind == ToolFailureType.SEGFAULT:
            err += f"Segmentation fault - exit {self.returncode}"
            err += f"\n{self.error_text}"
        elif self.kind == ToolFailureType.NONZERO_EXIT:
            err += f"Nonzero exit ({self.returncode})"
            err += f"\n{self.error_text}"
        else:
            err += "Unknown failure"
        return err
