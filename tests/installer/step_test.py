# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import os
import argparse
import unittest
import tempfile
from pathlib import Path
from unittest.mock import patch

from livehdflow.exceptions import InstallError
from livehdflow.installer import InstallerConfig, InstallStep


class EchoStep(InstallStep):
    name = "echo"
    title = "Echo step"

    def install(self):
        self.command(["echo", "hello from echo"])


class InstallerConfigTest(unittest.TestCase):
    def test_environ(self):
        "Compiler selection and bin dir reach subprocesses without touching os.environ"
        config = InstallerConfig(cc=Path("/opt/gcc/bin/gcc"), cxx=Path("/opt/gcc/bin/g++"), bin_dir=Path("/home/user/bin"))
        with patch.dict(os.environ, {"PATH": "/usr/bin"}):
            env = config.environ()
            self.assertEqual(os.environ["PATH"], "/usr/bin")
        self.assertEqual(env["CC"], "/opt/gcc/bin/gcc")
        self.assertEqual(env["CXX"], "/opt/gcc/bin/g++")
        self.assertEqual(env["PATH"].split(os.pathsep), ["/usr/bin", "/home/user/bin"])

    def test_environ_overrides(self):
        env = InstallerConfig().environ(CC="clang-19")
        self.assertEqual(env["CC"], "clang-19")

    def test_from_clargs(self):
        parser = argparse.ArgumentParser()
        InstallerConfig.add_arguments(parser)
        config = InstallerConfig.from_clargs(parser.parse_args(["--livehd-dir", "/src/livehd", "--no-bashrc", "--with-gsim", "--bazel-version", "7.0.0"]))
        self.assertEqual(config.livehd_dir, Path("/src/livehd"))
        self.assertIsNone(config.bashrc)
        self.assertTrue(config.with_gsim)
        self.assertFalse(config.with_essent)
        self.assertEqual(config.bazel_version, "7.0.0")
        self.assertEqual(config.lgshell, Path("/src/livehd/bazel-bin/main/lgshell"))


class InstallStepTest(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.config = InstallerConfig(bin_dir=self.root / "bin", bashrc=self.root / ".bashrc", sudo=[])
        self.step = EchoStep(self.config)

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_command_output_logged(self):
        with self.assertLogs("livehdflow.installer.step", level="INFO") as logs:
            self.step.run()
        self.assertTrue(any("hello from echo" in line for line in logs.output))

    def test_command_failure(self):
        "Non-zero exit raises InstallError with the step, command and exit status"
        with self.assertRaises(InstallError) as excp:
            self.step.command(["sh", "-c", "exit 4"])
        self.assertEqual(excp.exception.stage, "echo")
        self.assertEqual(excp.exception.returncode, 4)
        self.assertEqual(excp.exception.cmd, ["sh", "-c", "exit 4"])
        self.assertIn("exit status: 4", str(excp.exception))

    def test_command_unchecked(self):
        self.assertEqual(self.step.command(["sh", "-c", "exit 2"], check=False), 2)

    def test_command_missing_executable(self):
        with self.assertRaises(InstallError) as excp:
            self.step.command(["definitely-not-a-real-tool-xyz"])
        self.assertIn("Could not run", str(excp.exception))

    def test_sudo_prefix(self):
        self.config.sudo = ["env"]
        with patch("subprocess.Popen") as popen:
            popen.return_value.__enter__.return_value.stdout = []
            popen.return_value.__enter__.return_value.returncode = 0
            popen.return_value.returncode = 0
            self.step.command(["apt", "update"], sudo=True)
        self.assertEqual(popen.call_args.args[0], ["env", "apt", "update"])

    def test_command_environment(self):
        "Commands run with the configured compilers"
        self.config.cxx = Path("/opt/custom/g++")
        with self.assertLogs("livehdflow.installer.step", level="INFO") as logs:
            self.step.command(["sh", "-c", 'echo "cxx is $CXX"'])
        self.assertTrue(any("cxx is /opt/custom/g++" in line for line in logs.output))

    def test_query(self):
        self.assertEqual(self.step.query(["echo", "1.2.3"]), "1.2.3\n")
        self.assertIsNone(self.step.query(["sh", "-c", "exit 1"]))
        self.assertIsNone(self.step.query(["definitely-not-a-real-tool-xyz"]))

    def test_satisfied_step_skipped(self):
        with patch.object(EchoStep, "is_satisfied", return_value=True), patch.object(EchoStep, "install") as install:
            self.step.run()
        install.assert_not_called()

    def test_append_to_bashrc_once(self):
        self.step.append_to_bashrc("export FOO=1", "\nexport FOO=1\n")
        self.step.append_to_bashrc("export FOO=1", "\nexport FOO=1\n")
        self.assertEqual(self.config.bashrc.read_text().count("export FOO=1"), 1)

    def test_append_to_bashrc_disabled(self):
        self.config.bashrc = None
        self.step.append_to_bashrc("export FOO=1", "\nexport FOO=1\n")
        self.assertFalse((self.root / ".bashrc").exists())

    def test_require(self):
        fake = self.config.bin_dir / "mytool"
        self.config.bin_dir.mkdir()
        fake.write_text("#!/bin/sh\n")
        fake.chmod(0o755)
        self.step.require("mytool")
        with self.assertRaises(InstallError):
            self.step.require("definitely-not-a-real-tool-xyz")

    def test_clone_existing(self):
        "Existing checkouts are reused"
        dest = self.root / "repo"
        dest.mkdir()
        with patch.object(EchoStep, "command") as command:
            self.step.clone("https://example.com/repo.git", dest)
        command.assert_not_called()


if __name__ == "__main__":
    unittest.main(verbosity=2)
