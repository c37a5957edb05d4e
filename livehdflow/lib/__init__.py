# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

"""
Shared, low-level Python code used by the installer and the conversion pipeline: logging, CLI plumbing and external tool wrappers.
"""
