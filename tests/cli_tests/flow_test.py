# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import io
import re
import logging
import unittest
import tempfile
from pathlib import Path
from contextlib import redirect_stdout, redirect_stderr
from unittest.mock import patch

import livehdflow.lib.logger as FlowLogger
from livehdflow.config import RunConfiguration
from livehdflow.exceptions import ConfigurationError, InstallError
from livehdflow.flow import LiveHDFlow, main
from livehdflow.lib.toolchain import LgShell, Toolchain, Yosys

import fake_tools


class FlowCliTest(unittest.TestCase):
    """
    End to end runs of the ``livehd-setup`` command line with fake tools.
    The installer is patched out; it is covered by the installer tests.
    """

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.bin_dir = self.root / "bin"
        self.out_dir = self.root / "out"
        self.log_file = self.root / "run.log"
        self.design = fake_tools.write_design(self.root / "src")
        self.lgshell = fake_tools.write_tool(self.bin_dir, "lgshell", fake_tools.LGSHELL_OK)
        self.yosys = fake_tools.write_tool(self.bin_dir, "yosys", fake_tools.YOSYS_OK)

    def tearDown(self):
        FlowLogger.close_logger()
        self.temp_dir.cleanup()

    def common_args(self) -> list[str]:
        return [
            "--lgshell-path", str(self.lgshell),
            "--yosys-path", str(self.yosys),
            "--logger-file", str(self.log_file),
            "--logger-no-tee",
            "--livehd-dir", str(self.root / "livehd"),
        ]  # fmt: skip

    def run_main(self, args: list[str]) -> int:
        with redirect_stderr(io.StringIO()):
            return main(args + self.common_args())

    def test_convert_only(self):
        "design.v converted into out/design.v and out/design.fir, exit 0"
        with patch("livehdflow.flow.Installer") as installer:
            status = self.run_main(["--convert-only", "--input", str(self.design), "--output", str(self.out_dir)])
        self.assertEqual(status, 0)
        installer.assert_not_called()
        self.assertTrue((self.out_dir / "design.v").is_file())
        self.assertTrue((self.out_dir / "design.fir").is_file())
        self.assertEqual(fake_tools.calls(self.bin_dir), ["lgshell", "yosys"])

    def test_log_file(self):
        "Run log is timestamped, leveled and appended to"
        self.log_file.write_text("previous run\n")
        with patch("livehdflow.flow.Installer"):
            self.run_main(["--convert-only", "--input", str(self.design), "--output", str(self.out_dir)])
        lines = self.log_file.read_text().splitlines()
        self.assertEqual(lines[0], "previous run")
        self.assertTrue(any(re.match(r"\[\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\]SUCCESS ", line) for line in lines))
        self.assertIn("All operations completed successfully!", lines[-1])

    def test_convert_failure(self):
        "yosys failure exits non-zero, keeps optimized Verilog and names the stage"
        fake_tools.write_tool(self.bin_dir, "yosys", fake_tools.YOSYS_FAIL)
        status = self.run_main(["--convert-only", "--input", str(self.design), "--output", str(self.out_dir)])
        self.assertNotEqual(status, 0)
        self.assertTrue((self.out_dir / "design.v").is_file())
        self.assertFalse((self.out_dir / "design.fir").exists())
        log_text = self.log_file.read_text()
        self.assertIn("ERROR", log_text)
        self.assertIn("Failed at stage 'convert'", log_text)

    def test_missing_artifact(self):
        fake_tools.write_tool(self.bin_dir, "lgshell", fake_tools.LGSHELL_NO_OUTPUT)
        status = self.run_main(["--convert-only", "--input", str(self.design), "--output", str(self.out_dir)])
        self.assertEqual(status, 1)
        self.assertEqual(fake_tools.calls(self.bin_dir), ["lgshell"])
        self.assertIn("Optimized Verilog not found", self.log_file.read_text())

    def test_help_wins(self):
        "--help prints usage and exits 0 without validating or logging"
        stdout = io.StringIO()
        for argv in (["--help", "--install-only", "--convert-only"], ["--convert-only", "--input", "missing.v", "--help"], ["--bogus", "-h"]):
            with patch("livehdflow.flow.FlowLogger.from_clargs") as logger_init, redirect_stdout(stdout):
                with self.assertRaises(SystemExit) as excp:
                    main(argv)
            self.assertEqual(excp.exception.code, 0)
            logger_init.assert_not_called()
        self.assertIn("--convert-only", stdout.getvalue())
        self.assertFalse(self.log_file.exists())

    def test_unknown_flag(self):
        with redirect_stderr(io.StringIO()) as stderr:
            with self.assertRaises(SystemExit) as excp:
                main(["--frobnicate"])
        self.assertNotEqual(excp.exception.code, 0)
        self.assertIn("usage:", stderr.getvalue())

    def test_conflicting_flags(self):
        "Conflicting modes fail before anything is installed or converted"
        with patch("livehdflow.flow.Installer") as installer, patch("livehdflow.flow.Converter") as converter:
            with redirect_stderr(io.StringIO()) as stderr:
                status = main(["--install-only", "--convert-only", "--input", str(self.design)] + self.common_args())
        self.assertEqual(status, 1)
        installer.assert_not_called()
        converter.assert_not_called()
        self.assertIn("usage:", stderr.getvalue())
        self.assertEqual(fake_tools.calls(self.bin_dir), [])

    def test_convert_only_missing_input(self):
        status = self.run_main(["--convert-only", "--input", str(self.root / "missing.v")])
        self.assertEqual(status, 1)
        self.assertIn("Input file not found", self.log_file.read_text())
        self.assertEqual(fake_tools.calls(self.bin_dir), [])

    def test_default_is_install_only(self):
        "No flags and no input installs only, with a warning"
        with patch("livehdflow.flow.Installer") as installer, patch("livehdflow.flow.Converter") as converter:
            status = self.run_main([])
        self.assertEqual(status, 0)
        installer.return_value.run.assert_called_once()
        converter.assert_not_called()
        self.assertIn("WARNING", self.log_file.read_text())

    def test_install_and_convert(self):
        "An input without mode flags installs, then converts"
        with patch("livehdflow.flow.Installer") as installer:
            status = self.run_main(["--input", str(self.design), "--output", str(self.out_dir)])
        self.assertEqual(status, 0)
        installer.return_value.run.assert_called_once()
        self.assertTrue((self.out_dir / "design.fir").is_file())

    def test_install_failure(self):
        "Installer failure stops the run before conversion"
        with patch("livehdflow.flow.Installer") as installer:
            installer.return_value.run.side_effect = InstallError("Command failed", step="bazel", cmd=["wget"], returncode=8)
            status = self.run_main(["--input", str(self.design), "--output", str(self.out_dir)])
        self.assertEqual(status, 1)
        self.assertFalse(self.out_dir.exists())
        self.assertIn("Failed at stage 'bazel'", self.log_file.read_text())

    def test_missing_tool(self):
        "An lgshell that can't be located is reported as an optimize stage failure"
        missing = self.root / "missing" / "lgshell"
        args = ["--convert-only", "--input", str(self.design), "--output", str(self.out_dir), "--lgshell-path", str(missing)]
        with patch.dict("os.environ", {"PATH": str(self.root / "empty"), "LGSHELL": ""}):
            with redirect_stderr(io.StringIO()):
                status = main(args + self.common_args()[2:])
        self.assertEqual(status, 1)
        self.assertEqual(fake_tools.calls(self.bin_dir), [])
        self.assertIn("Failed at stage 'optimize'", self.log_file.read_text())

    def test_interrupt(self):
        "Ctrl-C exits 130, is logged, and leaves no log handlers behind"
        with patch("livehdflow.flow.Converter") as converter:
            converter.return_value.run.side_effect = KeyboardInterrupt
            status = self.run_main(["--convert-only", "--input", str(self.design), "--output", str(self.out_dir)])
        self.assertEqual(status, 130)
        self.assertIn("ERROR", self.log_file.read_text())
        handlers = logging.getLogger("livehdflow").handlers
        self.assertTrue(all(isinstance(handler, logging.NullHandler) for handler in handlers))

    def test_abbreviated_flag(self):
        "Only full flag names are accepted"
        for argv in (["--conv", "--input", str(self.design)], ["--install"]):
            with redirect_stderr(io.StringIO()) as stderr:
                with self.assertRaises(SystemExit) as excp:
                    main(argv)
            self.assertEqual(excp.exception.code, 2)
            self.assertIn("unrecognized arguments", stderr.getvalue())


class FlowApiTest(unittest.TestCase):
    "``LiveHDFlow`` used from Python without the command line"

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.bin_dir = self.root / "bin"
        self.design = fake_tools.write_design(self.root / "src")

    def tearDown(self):
        self.temp_dir.cleanup()

    def toolchain(self) -> Toolchain:
        return Toolchain(
            lgshell=LgShell(lgshell_path=fake_tools.write_tool(self.bin_dir, "lgshell", fake_tools.LGSHELL_OK)),
            yosys=Yosys(yosys_path=fake_tools.write_tool(self.bin_dir, "yosys", fake_tools.YOSYS_OK)),
        )

    def test_convert(self):
        config = RunConfiguration(convert_only=True, input_path=self.design, output_dir=self.root / "out")
        flow = LiveHDFlow(config, toolchain=self.toolchain())
        artifacts = flow.run()
        self.assertIs(artifacts, flow.artifacts)
        self.assertTrue(artifacts.output.is_file())

    def test_conflicting_config(self):
        "Configurations built in code are validated before anything runs"
        config = RunConfiguration(install_only=True, convert_only=True, input_path=self.design, output_dir=self.root / "out")
        with patch("livehdflow.flow.Installer") as installer:
            with self.assertRaises(ConfigurationError):
                LiveHDFlow(config, toolchain=self.toolchain()).run()
        installer.assert_not_called()
        self.assertEqual(fake_tools.calls(self.bin_dir), [])
        self.assertFalse((self.root / "out").exists())

    def test_default_config_installs(self):
        with self.assertLogs("livehdflow.config", level="WARNING"):
            flow = LiveHDFlow(RunConfiguration(), toolchain=self.toolchain())
        self.assertTrue(flow.config.install_only)
        with patch("livehdflow.flow.Installer") as installer:
            self.assertIsNone(flow.run())
        installer.return_value.run.assert_called_once()
        self.assertEqual(fake_tools.calls(self.bin_dir), [])


if __name__ == "__main__":
    unittest.main(verbosity=2)
