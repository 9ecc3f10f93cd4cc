"""Tests for the docsite command line."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from docsite.cli import _build_parser, main
from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture(autouse=True)
def _detach_cli_handlers():
    yield
    logger = logging.getLogger("docsite")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


def test_cli_accepts_verbose_before_command() -> None:
    args = _build_parser().parse_args(["--verbose", "build"])
    assert args.verbose is True
    assert args.command == "build"


def test_cli_accepts_verbose_after_command() -> None:
    args = _build_parser().parse_args(["generate", "-v", "--root", "site"])
    assert args.verbose is True
    assert args.command == "generate"
    assert args.root == "site"
    assert args.config is None


def _sample_project(project: ProjectBuilder) -> Path:
    project.write(
        {
            "docs/index.md": "# Home\n\nWelcome.\n",
            "src/math.ts": "export function add(a: number, b: number): number { return a + b; }\n",
            "src/broken.ts": "export function broken( {\n",
        }
    )
    return project.path()


def test_generate_reports_counts_and_skipped_files(project: ProjectBuilder, capsys) -> None:
    root = _sample_project(project)

    main(["generate", "--root", str(root)])

    out = capsys.readouterr().out
    assert "Generated 2 documents (1 prose, 1 api, 0 component)" in out
    assert "skipped api src/broken.ts: syntax error" in out
    assert not (root / "dist").exists()


def test_build_writes_site(project: ProjectBuilder, capsys) -> None:
    root = _sample_project(project)

    main(["build", "--root", str(root), "-v"])

    out = capsys.readouterr().out
    assert "Generated 2 documents" in out
    assert f"Site written to {root.resolve() / 'dist'}" in out
    assert (root / "dist" / "index.html").is_file()
    assert (root / "dist" / "api" / "math.html").is_file()


def test_log_file_receives_debug_records(project: ProjectBuilder, tmp_path: Path, capsys) -> None:
    root = _sample_project(project)
    log_file = tmp_path / "docsite.log"

    main(["generate", "--root", str(root), "-v", "--log-file", str(log_file)])

    logged = log_file.read_text(encoding="utf-8")
    assert "INFO docsite.orchestrator: Generating documents" in logged
    assert "DEBUG docsite.orchestrator: Resolved configuration for" in logged


def test_build_honours_explicit_config(project: ProjectBuilder, capsys) -> None:
    root = _sample_project(project)
    project.write({"site.yml": "title: Explicit\nout_dir: public\n"})

    main(["build", "--root", str(root), "--config", "site.yml"])

    page = (root / "public" / "index.html").read_text(encoding="utf-8")
    assert "<title>Home - Explicit</title>" in page


def test_missing_docs_dir_exits_with_error(tmp_path: Path, capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["build", "--root", str(tmp_path)])

    assert excinfo.value.code == 1
    assert "docsite build failed: Documents root does not exist" in capsys.readouterr().err


def test_command_is_required(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main([])

    assert excinfo.value.code == 2
