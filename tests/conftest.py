"""Shared pytest fixtures for the filegen test suite.

Provides reusable fixtures for:
- Temporary project directories with a manifest
- Temporary template roots with sample templates
- Ready-made generators (closed automatically after each test)
"""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from filegen import Generator, GeneratorConfig


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def write(path: Path, content: str) -> Path:
    """Write *content* (dedented) to *path*, creating parents."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project root containing a flat ``project.toml`` manifest."""
    root = tmp_path / "project"
    root.mkdir()
    write(
        root / "project.toml",
        """\
        name = "demo"
        version = "1.2.3"
        description = "A demo project"
        authors = ["Ada", "Linus"]

        [features]
        auth = true
        """,
    )
    yield root


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """Template root with a handful of sample templates."""
    root = tmp_path / "templates"
    root.mkdir()
    write(root / "greeting.tmpl", "Hello {{name}}!")
    write(root / "missing.tmpl", "Hello {{missing}}!")
    write(
        root / "readme" / "README.md.j2",
        """\
        # {{ name }} v{{ version }}

        {{ description }}
        {% for author in authors %}
        - {{ author }}
        {% endfor %}
        """,
    )
    write(root / "partials" / "header.j2", "# generated for {{ name }}\n")
    write(
        root / "module.py.j2",
        """\
        {% include "partials/header.j2" %}
        class {{ name_pascal }}:
            pass
        """,
    )
    yield root


@pytest.fixture
def outside_file(tmp_path: Path) -> Path:
    """A file next to (not inside) the template root."""
    return write(tmp_path / "secret.txt", "top secret {{ name }}")


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


@pytest.fixture
def generator(project_dir: Path, template_dir: Path) -> Generator:
    """A generator with default settings, closed after the test."""
    gen = Generator(project_dir, template_dir)
    yield gen
    gen.close()


@pytest.fixture
def uncached_generator(project_dir: Path, template_dir: Path) -> Generator:
    """A generator that re-reads templates on every call."""
    gen = Generator(project_dir, template_dir, GeneratorConfig(cache_templates=False))
    yield gen
    gen.close()
