# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

import logging

from .config import RunConfiguration, RunMode
from .artifacts import ConversionArtifacts
from .converter import Converter
from .flow import LiveHDFlow


logging.getLogger("livehdflow").addHandler(logging.NullHandler())

__all__ = ["RunConfiguration", "RunMode", "ConversionArtifacts", "Converter", "LiveHDFlow"]
