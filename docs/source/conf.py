# Configuration file for the Sphinx documentation builder.
#
# For the full list of built-in configuration values, see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html
# SPDX-FileCopyrightText: © 2025 Tenstorrent AI ULC
# SPDX-License-Identifier: Apache-2.0

# -- Project information -----------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#project-information

from pathlib import Path
import sys

# This removes Bases: object from output, not sure how else to do this
from sphinx.ext import autodoc


class MockedClassDocumenter(autodoc.ClassDocumenter):
    def add_line(self, line: str, source: str, *lineno: int) -> None:
        if line == "   Bases: :py:class:`object`":
            return
        super().add_line(line, source, *lineno)


autodoc.ClassDocumenter = MockedClassDocumenter


project = "livehdflow"
copyright = "© 2025 Tenstorrent AI ULC"
author = "Tenstorrent AI ULC"
repo_path = Path(__file__).parents[2]
pyproject_path = repo_path / "pyproject.toml"

version = None
with open(pyproject_path, "r") as f:
    for line in f:
        if line.startswith("version =") or line.startswith("version="):
            version = line.split("=")[1].strip().strip('"')
            break
if version is None:
    raise ValueError(f"Version not found in {pyproject_path}, ensure pyproject.toml has a 'version=str' or 'version = str'")

release = version

# -- General configuration ---------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#general-configuration

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
]

autodoc_default_options = {"show-inheritance": False}
autodoc_member_order = "bysource"
exclude_patterns = ["_build"]

# -- Options for HTML output -------------------------------------------------
# https://www.sphinx-doc.org/en/master/usage/configuration.html#options-for-html-output

html_theme = "sphinx_rtd_theme"
html_theme_options = {
    "prev_next_buttons_location": "bottom",
    "collapse_navigation": False,
    "sticky_navigation": True,
    "navigation_depth": 4,
}

sys.path.insert(0, str(repo_path))
