# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ConversionArtifacts:
    """
    Container for the file paths of one conversion.
    Used to pass around generated files to the pipeline stages.

    ``optimized`` keeps the input's file name and moves it into the output directory.
    ``output`` is the input's name with its extension replaced by the target format's.
    """

    source: Path
    optimized: Path
    output: Path

    @classmethod
    def from_input(cls, input_path: Path, output_dir: Path, target_ext: str = "fir") -> "ConversionArtifacts":
        "Create from an input design and output directory"
        return cls(
            source=input_path,
            optimized=output_dir / input_path.name,
            output=output_dir / f"{input_path.stem}.{target_ext}",
        )
