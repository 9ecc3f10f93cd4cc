"""Helper utilities for constructing temporary documentation projects in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping

from docsite.config import ResolvedDocsConfig, config_from_mapping, resolve_config


class ProjectBuilder:
    """Writes files into a throwaway project and resolves its configuration."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        (self.root / "docs").mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries into the project."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            normalised = textwrap.dedent(content).lstrip("\n")
            path.write_text(normalised, encoding="utf-8")

    def config(self, data: Mapping[str, object] | None = None) -> ResolvedDocsConfig:
        """Resolve a configuration for the project from an in-memory mapping."""
        return resolve_config(config_from_mapping(self.root, dict(data or {})))

    def path(self) -> Path:
        return self.root


__all__ = ["ProjectBuilder"]
