# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import os
import argparse
import subprocess
import shutil
import tempfile
import logging
from abc import ABC, abstractmethod
from typing import Optional
from pathlib import Path

from livehdflow.lib.toolchain.exceptions import ToolchainError, ToolFailureType

log = logging.getLogger(__name__)


class Tool(ABC):
    """
    Class for running executable tools.
    Attempts to use provided path, otherwise uses environment variable, otherwise searches for path.

    :param path: path to executable
    :param env_name: name of environment variable holding the executable path (e.g. "YOSYS")
    :param tool_name: executable name to search for in PATH (e.g. "yosys")
    :param args: arguments to run with executable
    :param timeout: default timeout in seconds for each run, ``None`` waits forever
    """

    def __init__(self, path: Optional[Path], env_name: str, tool_name: str, args: Optional[list] = None, timeout: Optional[float] = None):
        self.args = args if args else []
        self.timeout = timeout
        self.executable = self.find_executable(path, env_name, tool_name).resolve()
        log.info(f"Built {self.__class__.__name__} with executable: {self.executable}")

    def find_executable(self, tool_path: Optional[Path], env_name: str, tool_name: str) -> Path:
        """
        Searches for executable. Checks for Path tool_path if provided
        if no tool_path, checks for env_name environment variable
        if no env_name, checks for tool_name in PATH
        """
        log.debug(f"Searching for {tool_name} executable")
        if tool_path is not None and tool_path.exists():
            return tool_path
        if env_name:
            env_path = os.environ.get(env_name)
            if env_path:
                env_tool_path = Path(env_path)
                if env_tool_path.exists():
                    return env_tool_path
        which_executable = shutil.which(tool_name)
        if which_executable is None:
            raise ToolchainError(
                tool_name=self.__class__.__name__,
                cmd=[tool_name],
                kind=ToolFailureType.NOT_FOUND,
                returncode=-1,
                error_text=f"Could not find {tool_name} in PATH. Add it to your PATH or set {env_name} environment variable",
            )
        return Path(which_executable)

    def run(self, args: Optional[list] = None, input_file: Optional[Path] = None, cwd: Optional[Path] = None, timeout: Optional[float] = None) -> subprocess.CompletedProcess:
        """
        Run the executable with args, returns CompletedProcess. Blocks until the process exits.
        stdout and stderr are captured together and copied to the log.

        :param args: additional arguments for this run only
        :param input_file: file to feed to the process on stdin
        :param cwd: working directory to run the command in
        :param timeout: timeout for the command, defaults to the tool's timeout

        :raises ToolchainError: if tool failed to run
        """
        cmd = [self.executable] + self.args + (args or [])
        if timeout is None:
            timeout = self.timeout
        log.info(f"Running {' '.join(str(c) for c in cmd)}")

        try:
            if input_file is not None:
                log.info(f"Piping {input_file} to stdin")
                with input_file.open("r") as f:
                    process = subprocess.run(cmd, stdin=f, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, cwd=cwd, timeout=timeout)
            else:
                process = subprocess.run(cmd, stdin=subprocess.DEVNULL, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, cwd=cwd, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise ToolchainError(tool_name=self.__class__.__name__, cmd=cmd, kind=ToolFailureType.TIMEOUT, returncode=-1, error_text=f"No exit after {timeout} seconds") from e
        except OSError as e:
            raise ToolchainError(tool_name=self.__class__.__name__, cmd=cmd, kind=ToolFailureType.LAUNCH_FAILURE, returncode=-1, error_text=str(e)) from e

        tool_log = logging.getLogger(f"{__name__}.{self.__class__.__name__.lower()}")
        for line in (process.stdout or "").splitlines():
            if line:
                tool_log.info(line)

        if process.returncode in (139, -11):
            self._raise_toolchain_error(process, kind=ToolFailureType.SEGFAULT, error_text=self._tail(process.stdout))

        self._classify(process)
        return process

    def _raise_toolchain_error(self, process: subprocess.CompletedProcess, kind: ToolFailureType, error_text: Optional[str] = None):
        """
        Helper method to raise ToolchainError with standardized parameters. Use instead of raising directly.
        """
        raise ToolchainError(tool_name=self.__class__.__name__, cmd=process.args, kind=kind, returncode=process.returncode, error_text=error_text)

    @staticmethod
    def _tail(output: Optional[str], lines: int = 20) -> str:
        "Last few lines of tool output, for error messages"
        if not output:
            return "No output from tool"
        return "\n".join(output.rstrip().splitlines()[-lines:])

    @abstractmethod
    def _classify(self, process: subprocess.CompletedProcess):
        """
        Check the return code of the subprocess run, raises meaningful ToolchainError if tool failed to run.

        :param process: subprocess.CompletedProcess
        :raises ToolchainError: if tool failed to run
        """
        pass


class LgShell(Tool):
    """
    LiveHD interactive shell. Commands are piped to ``lgshell`` on stdin.

    :param lgshell_path: explicit path to ``lgshell``. Defaults to the Bazel build output inside ``livehd_dir``
    :param livehd_dir: LiveHD checkout; the shell runs from here so relative ``lgdb`` paths land inside it
    :param lgdb: graph database directory passed to ``inou.liveparse``
    """

    passes = ["inou.verilog", "pass.compiler"]

    def __init__(self, lgshell_path: Optional[Path] = None, livehd_dir: Optional[Path] = None, lgdb: str = "./lgdb_temp", timeout: Optional[float] = None):
        self.livehd_dir = livehd_dir
        self.lgdb = lgdb
        if lgshell_path is None and livehd_dir is not None:
            lgshell_path = self.default_path(livehd_dir)
        super().__init__(path=lgshell_path, env_name="LGSHELL", tool_name="lgshell", timeout=timeout)

    @staticmethod
    def default_path(livehd_dir: Path) -> Path:
        return livehd_dir / "bazel-bin" / "main" / "lgshell"

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        lgshell_parser = parser.add_argument_group("LgShell", description="Arguments for the LiveHD shell")
        # fmt: off
        lgshell_parser.add_argument("--lgshell-path", dest="lgshell_path", type=Path, default=None, help="Path to lgshell executable. If not provided, uses LGSHELL environment variable, then <livehd-dir>/bazel-bin/main/lgshell")  # noqa: E501
        lgshell_parser.add_argument("--lgdb", type=str, default="./lgdb_temp", help="LiveHD graph database directory, relative to the LiveHD checkout. Default: %(default)s")
        # fmt: on

    @classmethod
    def from_clargs(cls, args: argparse.Namespace, livehd_dir: Optional[Path] = None):
        return cls(lgshell_path=args.lgshell_path, livehd_dir=livehd_dir, lgdb=args.lgdb, timeout=args.tool_timeout)

    def optimize_script(self, input_path: Path, output_dir: Path) -> str:
        "lgshell pipeline that parses ``input_path``, runs the compiler passes and writes Verilog into ``output_dir``"
        stages = [f"inou.liveparse path:{self.lgdb} files:{input_path}"] + self.passes + [f"inou.cgen.verilog odir:{output_dir}"]
        return " |> ".join(stages) + "\n"

    def optimize(self, input_path: Path, output_dir: Path) -> subprocess.CompletedProcess:
        """
        Optimize ``input_path`` and write the generated Verilog into ``output_dir``.
        The command script is written to a temporary file that is removed once lgshell exits.
        """
        script = self.optimize_script(input_path, output_dir)
        with tempfile.NamedTemporaryFile("w", prefix="livehd_commands_", suffix=".txt", delete=False) as f:
            f.write(script)
            script_path = Path(f.name)
        log.debug(f"lgshell commands: {script.strip()}")
        cwd = self.livehd_dir if self.livehd_dir is not None and self.livehd_dir.is_dir() else output_dir
        try:
            return self.run(input_file=script_path, cwd=cwd)
        finally:
            script_path.unlink()

    def _classify(self, process: subprocess.CompletedProcess):
        if process.returncode != 0:
            self._raise_toolchain_error(process, ToolFailureType.NONZERO_EXIT, self._tail(process.stdout))


class Yosys(Tool):
    """
    Yosys, used to convert Verilog to FIRRTL.

    :param yosys_path: explicit path to ``yosys``. Defaults to YOSYS environment variable, then PATH
    """

    def __init__(self, yosys_path: Optional[Path] = None, yosys_args: Optional[list] = None, timeout: Optional[float] = None):
        super().__init__(path=yosys_path, env_name="YOSYS", tool_name="yosys", args=yosys_args, timeout=timeout)

    @staticmethod
    def add_arguments(parser: argparse.ArgumentParser):
        yosys_parser = parser.add_argument_group("Yosys", description="Arguments for Yosys")
        # fmt: off
        yosys_parser.add_argument("--yosys-path", dest="yosys_path", type=Path, default=None, help="Path to yosys executable. If not provided, uses YOSYS environment variable, then PATH")
        yosys_parser.add_argument("--yosys-args", dest="yosys_args", nargs="*", default=[], help="Additional args to pass to yosys")
        # fmt: on

    @classmethod
    def from_clargs(cls, args: argparse.Namespace):
        return cls(yosys_path=args.yosys_path, yosys_args=args.yosys_args, timeout=args.tool_timeout)

    @staticmethod
    def convert_script(source: Path, output: Path) -> str:
        return f"read_verilog -sv {source}; write_firrtl {output}"

    def convert(self, source: Path, output: Path, cwd: Optional[Path] = None) -> subprocess.CompletedProcess:
        "Read ``source`` as SystemVerilog and write FIRRTL to ``output``"
        return self.run(args=["-p", self.convert_script(source, output)], cwd=cwd)

    def _classify(self, process: subprocess.CompletedProcess):
        if process.returncode != 0:
            errors = [line for line in (process.stdout or "").splitlines() if line.startswith("ERROR")]
            if errors:
                self._raise_toolchain_error(process, ToolFailureType.NONZERO_EXIT, "\n".join(errors))
            self._raise_toolchain_error(process, ToolFailureType.NONZERO_EXIT, self._tail(process.stdout))
