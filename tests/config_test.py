# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import argparse
import unittest
import tempfile
from pathlib import Path
from unittest.mock import patch

from livehdflow.config import RunConfiguration, RunMode, DEFAULT_OUTPUT_DIR
from livehdflow.exceptions import ConfigurationError, MissingFileError

import fake_tools


class RunConfigurationTest(unittest.TestCase):
    "Pre-flight validation and mode resolution"

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.design = fake_tools.write_design(self.root)

    def tearDown(self):
        self.temp_dir.cleanup()

    def parse(self, argv: list[str]) -> RunConfiguration:
        parser = argparse.ArgumentParser()
        RunConfiguration.add_arguments(parser)
        return RunConfiguration.from_clargs(parser.parse_args(argv))

    def test_defaults(self):
        config = self.parse([])
        self.assertFalse(config.install_only)
        self.assertFalse(config.convert_only)
        self.assertIsNone(config.input_path)
        self.assertEqual(config.output_dir, DEFAULT_OUTPUT_DIR)

    def test_flags(self):
        config = self.parse(["--convert-only", "--input", str(self.design), "--output", "out"])
        self.assertTrue(config.convert_only)
        self.assertEqual(config.input_path, self.design)
        self.assertEqual(config.output_dir, Path("out"))

    def test_empty_input_is_unset(self):
        self.assertIsNone(self.parse(["--input", ""]).input_path)

    def test_conflicting_modes(self):
        "--install-only and --convert-only together is a configuration error"
        config = RunConfiguration(install_only=True, convert_only=True, input_path=self.design)
        with self.assertRaises(ConfigurationError) as excp:
            config.validate()
        self.assertIn("--install-only and --convert-only", str(excp.exception))

    def test_convert_only_requires_input(self):
        with self.assertRaises(ConfigurationError):
            RunConfiguration(convert_only=True).validate()

    def test_convert_only_missing_input(self):
        "Missing input file is a missing-file error, not a configuration error"
        missing = self.root / "missing.v"
        with self.assertRaises(MissingFileError) as excp:
            RunConfiguration(convert_only=True, input_path=missing).validate()
        self.assertEqual(excp.exception.path, missing)
        self.assertIn(str(missing), str(excp.exception))

    def test_convert_only_directory_input(self):
        with self.assertRaises(MissingFileError):
            RunConfiguration(convert_only=True, input_path=self.root).validate()

    def test_no_flags_no_input_falls_back_to_install(self):
        "Neither mode flag nor input resolves to install-only with a warning"
        config = RunConfiguration()
        with self.assertLogs("livehdflow.config", level="WARNING") as logs:
            resolved = config.validate()
        self.assertTrue(resolved.install_only)
        self.assertEqual(resolved.mode, RunMode.INSTALL_ONLY)
        self.assertFalse(config.install_only, "Original configuration is not modified")
        self.assertIn("No input file specified", logs.output[0])

    def test_modes(self):
        self.assertEqual(RunConfiguration(install_only=True).validate().mode, RunMode.INSTALL_ONLY)
        self.assertEqual(RunConfiguration(convert_only=True, input_path=self.design).validate().mode, RunMode.CONVERT_ONLY)
        self.assertEqual(RunConfiguration(input_path=self.design).validate().mode, RunMode.INSTALL_AND_CONVERT)

    def test_install_only_ignores_input(self):
        config = RunConfiguration(install_only=True, input_path=self.design).validate()
        self.assertTrue(config.runs_installer)
        self.assertFalse(config.runs_conversion)

    def test_validate_has_no_side_effects(self):
        "Validation never starts a process or creates the output directory"
        output_dir = self.root / "out"
        with patch("subprocess.run") as run, patch("subprocess.Popen") as popen:
            with self.assertRaises(ConfigurationError):
                RunConfiguration(install_only=True, convert_only=True, output_dir=output_dir).validate()
            RunConfiguration(convert_only=True, input_path=self.design, output_dir=output_dir).validate()
        run.assert_not_called()
        popen.assert_not_called()
        self.assertFalse(output_dir.exists())


if __name__ == "__main__":
    unittest.main(verbosity=2)
