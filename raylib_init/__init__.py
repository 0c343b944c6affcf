"""
raylib_init package

This package implements raylib-init, a CLI that provisions a raylib C project.

Key responsibilities are split across modules:
- `templates.py`: fixed line-based templates for the generated project files
- `renderer.py`: directory creation and templated file writing (the provisioner)
- `tree.py`: selective recursive copy and recursive removal used for vendoring
- `config.py`: vendoring/build configuration with YAML overrides
- `github_client.py`: isolated GitHub REST API interactions (release lookup)
- `cli.py`: CLI entrypoint and orchestration (provision -> clone -> vendor -> build)
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
