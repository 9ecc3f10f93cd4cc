"""Tests for the generate/build orchestration."""

from __future__ import annotations

import asyncio

import pytest

from docsite.errors import DocsiteError
from docsite.orchestrator import Orchestrator
from docsite.plugins import define_plugin
from tests._fixtures.project_builder import ProjectBuilder


def test_configured_plugins_shape_config_and_content(project: ProjectBuilder) -> None:
    project.write(
        {
            "docs.yml": """
            plugins:
              - tests._fixtures.sample_plugins:banner
              - tests._fixtures.sample_plugins:RetitlePlugin
            """,
            "docs/index.md": "# Home\n",
        }
    )
    orchestrator = Orchestrator(project.path(), include_entry_points=False)

    outcome = asyncio.run(orchestrator.build())

    assert outcome.config.title == "Retitled"
    assert [doc.path for doc in outcome.generation.docs] == ["index.md"]
    page = (outcome.config.out_dir / "index.html").read_text(encoding="utf-8")
    assert "<p>Banner</p>" in page
    assert "<title>Home - Retitled</title>" in page


def test_prepare_runs_config_hooks_once(project: ProjectBuilder) -> None:
    calls = []
    plugin = define_plugin("counter", config_resolved=calls.append)
    orchestrator = Orchestrator(project.path(), plugins=[plugin], include_entry_points=False)

    async def run():
        first = await orchestrator.prepare()
        second = await orchestrator.prepare()
        await orchestrator.generate()
        return first, second

    first, second = asyncio.run(run())

    assert first is second
    assert calls == [first]


def test_generate_does_not_write_output(project: ProjectBuilder) -> None:
    project.write({"docs/guide.md": "# Guide\n"})

    result = asyncio.run(Orchestrator(project.path(), include_entry_points=False).generate())

    assert [doc.title for doc in result.docs] == ["Guide"]
    assert not (project.path() / "dist").exists()


def test_plugins_are_unavailable_before_prepare(project: ProjectBuilder) -> None:
    orchestrator = Orchestrator(project.path(), include_entry_points=False)

    with pytest.raises(DocsiteError):
        orchestrator._plugins()
