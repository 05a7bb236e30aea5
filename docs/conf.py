# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Sphinx configuration for rds-composer documentation."""

import os
import sys

# index.md documents the package with automodule
sys.path.insert(0, os.path.abspath("../src"))

project = "rds-composer"
copyright = "2025, Softwell S.r.l."
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
    "myst_parser",
]

# Google-style docstrings
napoleon_numpy_docstring = False

# automodule in index.md carries no options of its own
autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
}
autodoc_typehints = "description"

intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
}

html_theme = "furo"
html_title = "rds-composer"

source_suffix = {".md": "markdown"}
master_doc = "index"
exclude_patterns = ["_build"]
