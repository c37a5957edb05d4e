# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging
from pathlib import Path
from typing import Any, Callable
from dataclasses import dataclass

import livehdflow.lib.logger as FlowLogger
from livehdflow.artifacts import ConversionArtifacts
from livehdflow.exceptions import MissingFileError
from livehdflow.lib.toolchain import Toolchain, ToolchainError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineStage:
    """
    One external tool invocation in the conversion pipeline.

    :param name: stage name, reported on failure
    :param run: runs the external tool, raises ``ToolchainError`` on failure
    :param artifact: file the stage must leave behind
    :param description: human readable name of ``artifact``
    """

    name: str
    run: Callable[[], Any]
    artifact: Path
    description: str


def human_size(num_bytes: int) -> str:
    "Format a byte count like ``du -h``"
    size = float(num_bytes)
    for unit in ["B", "K", "M", "G"]:
        if size < 1024 or unit == "G":
            break
        size /= 1024
    if unit == "B":
        return f"{int(size)}{unit}"
    return f"{size:.1f}{unit}"


class Converter:
    """
    Verilog to FIRRTL conversion. Runs LiveHD to optimize the design, then Yosys to emit FIRRTL.

    Stages run strictly in order and every failure is fatal: no retries, and the remaining stages are skipped.
    Artifacts from earlier stages are left on disk. Re-running replaces them.
    Tools are looked up when their stage starts, so a missing executable fails that stage.

    :param toolchain: ``Toolchain`` providing ``lgshell`` and ``yosys``
    :param output_dir: directory that receives all artifacts, created if missing
    :param target_ext: extension of the final artifact
    """

    def __init__(self, toolchain: Toolchain, output_dir: Path, target_ext: str = "fir"):
        self.toolchain = toolchain
        self.output_dir = output_dir.resolve()
        self.target_ext = target_ext

    def stages(self, artifacts: ConversionArtifacts) -> list[PipelineStage]:
        return [
            PipelineStage(
                name="optimize",
                run=lambda: self.toolchain.lgshell.optimize(artifacts.source, self.output_dir),
                artifact=artifacts.optimized,
                description="Optimized Verilog",
            ),
            PipelineStage(
                name="convert",
                run=lambda: self.toolchain.yosys.convert(artifacts.optimized, artifacts.output, cwd=self.output_dir),
                artifact=artifacts.output,
                description="FIRRTL output",
            ),
        ]

    def run(self, input_path: Path) -> ConversionArtifacts:
        """
        Convert ``input_path``.

        :raises MissingFileError: if the input is missing, or a stage exits cleanly without producing its artifact
        :raises ToolchainError: if a tool fails; ``stage`` is set to the failing stage
        :returns: paths of the input, intermediate and final artifacts
        """
        FlowLogger.header(log, "Running Verilog to FIRRTL Conversion")

        # The input may have moved since the configuration was validated
        if not input_path.is_file():
            raise MissingFileError(input_path, "Input file", stage="input")
        input_path = input_path.resolve()

        self.output_dir.mkdir(parents=True, exist_ok=True)
        log.info(f"Output directory: {self.output_dir}")

        artifacts = ConversionArtifacts.from_input(input_path, self.output_dir, self.target_ext)
        stages = self.stages(artifacts)
        for i, stage in enumerate(stages, start=1):
            log.info(f"[Step {i}/{len(stages)}] Running {stage.name} stage")
            # a leftover artifact from an earlier run must not satisfy this stage
            if stage.artifact != artifacts.source:
                stage.artifact.unlink(missing_ok=True)
            try:
                stage.run()
            except ToolchainError as e:
                e.stage = stage.name
                raise
            if not stage.artifact.is_file():
                raise MissingFileError(stage.artifact, stage.description, stage=stage.name)
            FlowLogger.success(log, f"{stage.name} stage completed: {stage.artifact}")

        self.report(artifacts)
        return artifacts

    def report(self, artifacts: ConversionArtifacts):
        FlowLogger.success(log, f"FIRRTL file created: {artifacts.output}")
        log.info(f"File size: {human_size(artifacts.output.stat().st_size)}")
        FlowLogger.header(log, "Conversion Complete!")
        log.info(f"Input Verilog:     {artifacts.source}")
        log.info(f"Optimized Verilog: {artifacts.optimized}")
        log.info(f"Output FIRRTL:     {artifacts.output}")
