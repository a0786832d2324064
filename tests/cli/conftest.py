"""Fixtures for CLI tests.

Every command builds its backend through ``tyr.core.engine.create_provider``;
``use_provider`` swaps that for a scripted fake so no test needs a model.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner() -> CliRunner:
    """Create a Click CliRunner for invoking commands."""
    return CliRunner()


@pytest.fixture
def use_provider(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Install a fake provider for the next CLI invocation.

    Runs the test from ``tmp_path`` so default report files land there.
    Returns a function taking the provider to install.
    """
    monkeypatch.setenv("AI_PROVIDER", "ollama")
    monkeypatch.chdir(tmp_path)

    def install(provider):
        monkeypatch.setattr("tyr.core.engine.create_provider", lambda config: provider)
        return provider

    return install


@pytest.fixture
def design_doc(tmp_path: Path) -> Path:
    """A small architecture description."""
    path = tmp_path / "design.md"
    path.write_text("# Shop\nBrowser -> API gateway -> orders service -> Postgres\n")
    return path


@pytest.fixture
def infra_dir(tmp_path: Path) -> Path:
    """A directory with two Terraform files and one unrelated file."""
    root = tmp_path / "infra"
    root.mkdir()
    (root / "main.tf").write_text('resource "aws_s3_bucket" "logs" {}\n')
    (root / "network.tf").write_text('resource "aws_vpc" "main" {}\n')
    (root / "README.txt").write_text("not scanned\n")
    return root
