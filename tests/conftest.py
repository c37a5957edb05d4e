# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

"""
Pytest configuration. Makes the shared test helpers in this directory importable from every test subdirectory.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))
