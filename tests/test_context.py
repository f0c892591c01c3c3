"""Unit tests for project context derivation (filegen.context).

Covers:
- Manifest discovery order
- Every supported manifest format
- Derived identifier keys and defaults
- Static variable overrides
- InvalidProject failures (missing, malformed, nameless manifests)
- Determinism
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest

from filegen.config import DEFAULT_MANIFEST_NAMES
from filegen.context import DEFAULT_VERSION, ContextResolver
from filegen.errors import InvalidProjectError


def _write(path: Path, content: str) -> Path:
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def _resolver(root: Path, **kwargs) -> ContextResolver:
    kwargs.setdefault("manifest_names", DEFAULT_MANIFEST_NAMES)
    return ContextResolver(root, **kwargs)


# ---------------------------------------------------------------------------
# Manifest formats
# ---------------------------------------------------------------------------


class TestManifestFormats:
    @pytest.mark.unit
    def test_project_toml(self, project_dir: Path):
        context = _resolver(project_dir).resolve()
        assert context["name"] == "demo"
        assert context["version"] == "1.2.3"
        assert context["description"] == "A demo project"
        assert context["authors"] == ["Ada", "Linus"]
        assert context["features"] == {"auth": True}
        assert context["manifest"] == "project.toml"

    @pytest.mark.unit
    def test_pyproject_project_table(self, tmp_path: Path):
        _write(
            tmp_path / "pyproject.toml",
            """\
            [build-system]
            requires = ["setuptools"]

            [project]
            name = "py-demo"
            version = "0.4.0"
            """,
        )
        context = _resolver(tmp_path).resolve()
        assert context["name"] == "py-demo"
        assert context["version"] == "0.4.0"
        assert "build-system" not in context

    @pytest.mark.unit
    def test_pyproject_poetry_table(self, tmp_path: Path):
        _write(
            tmp_path / "pyproject.toml",
            """\
            [tool.poetry]
            name = "poetry-demo"
            version = "2.0.0"
            """,
        )
        assert _resolver(tmp_path).resolve()["name"] == "poetry-demo"

    @pytest.mark.unit
    def test_cargo_toml(self, tmp_path: Path):
        _write(
            tmp_path / "Cargo.toml",
            """\
            [package]
            name = "generator"
            version = "0.1.0"
            authors = ["someone"]

            [dependencies]
            tera = "0.11"
            """,
        )
        context = _resolver(tmp_path).resolve()
        assert context["name"] == "generator"
        assert context["authors"] == ["someone"]
        assert "dependencies" not in context

    @pytest.mark.unit
    def test_package_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text(
            json.dumps({"name": "web-app", "version": "3.1.4", "private": True}),
            encoding="utf-8",
        )
        context = _resolver(tmp_path).resolve()
        assert context["name"] == "web-app"
        assert context["private"] is True

    @pytest.mark.parametrize("filename", ["project.yaml", "project.yml"])
    @pytest.mark.unit
    def test_yaml(self, tmp_path: Path, filename: str):
        _write(
            tmp_path / filename,
            """\
            name: yaml-demo
            version: 1.0.0
            modules:
              - core
              - api
            """,
        )
        context = _resolver(tmp_path).resolve()
        assert context["name"] == "yaml-demo"
        assert context["modules"] == ["core", "api"]

    @pytest.mark.unit
    def test_custom_manifest_name_by_suffix(self, tmp_path: Path):
        (tmp_path / "meta.json").write_text(json.dumps({"name": "custom"}), encoding="utf-8")
        context = _resolver(tmp_path, manifest_names=["meta.json"]).resolve()
        assert context["name"] == "custom"
        assert context["manifest"] == "meta.json"

    @pytest.mark.unit
    def test_unsupported_suffix(self, tmp_path: Path):
        (tmp_path / "meta.ini").write_text("name=x", encoding="utf-8")
        with pytest.raises(InvalidProjectError, match="unsupported"):
            _resolver(tmp_path, manifest_names=["meta.ini"]).resolve()


class TestManifestDiscovery:
    @pytest.mark.unit
    def test_first_configured_name_wins(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "flat"\n')
        (tmp_path / "package.json").write_text('{"name": "js"}', encoding="utf-8")
        assert _resolver(tmp_path).resolve()["name"] == "flat"

    @pytest.mark.unit
    def test_order_is_configurable(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "flat"\n')
        (tmp_path / "package.json").write_text('{"name": "js"}', encoding="utf-8")
        resolver = _resolver(tmp_path, manifest_names=["package.json", "project.toml"])
        assert resolver.resolve()["name"] == "js"

    @pytest.mark.unit
    def test_directory_named_like_manifest_is_skipped(self, tmp_path: Path):
        (tmp_path / "project.toml").mkdir()
        (tmp_path / "package.json").write_text('{"name": "js"}', encoding="utf-8")
        assert _resolver(tmp_path).resolve()["name"] == "js"

    @pytest.mark.unit
    def test_find_manifest(self, project_dir: Path):
        assert _resolver(project_dir).find_manifest() == project_dir.resolve() / "project.toml"


# ---------------------------------------------------------------------------
# Derived keys
# ---------------------------------------------------------------------------


class TestDerivedKeys:
    @pytest.mark.unit
    def test_identifier_variants(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "my-cool_app"\n')
        context = _resolver(tmp_path).resolve()
        assert context["name_snake"] == "my_cool_app"
        assert context["name_kebab"] == "my-cool-app"
        assert context["name_pascal"] == "MyCoolApp"
        assert context["name_camel"] == "myCoolApp"

    @pytest.mark.unit
    def test_defaults_when_absent(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "bare"\n')
        context = _resolver(tmp_path).resolve()
        assert context["version"] == DEFAULT_VERSION
        assert context["description"] == ""

    @pytest.mark.unit
    def test_numeric_version_stringified(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "n"\nversion = 2\n')
        assert _resolver(tmp_path).resolve()["version"] == "2"

    @pytest.mark.unit
    def test_structured_version_falls_back(self, tmp_path: Path):
        _write(
            tmp_path / "Cargo.toml",
            """\
            [package]
            name = "member"
            version = { workspace = true }
            """,
        )
        assert _resolver(tmp_path).resolve()["version"] == DEFAULT_VERSION

    @pytest.mark.unit
    def test_name_is_stripped(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "  padded  "\n')
        assert _resolver(tmp_path).resolve()["name"] == "padded"

    @pytest.mark.unit
    def test_project_path_and_table(self, project_dir: Path):
        context = _resolver(project_dir).resolve()
        assert context["project_path"] == project_dir.resolve().as_posix()
        assert context["project"]["name"] == "demo"
        assert context["project"]["features"] == {"auth": True}

    @pytest.mark.unit
    def test_variables_override(self, project_dir: Path):
        resolver = _resolver(project_dir, variables={"name": "override", "license": "MIT"})
        context = resolver.resolve()
        assert context["name"] == "override"
        assert context["license"] == "MIT"
        # derived keys are computed from the manifest name
        assert context["name_pascal"] == "Demo"

    @pytest.mark.unit
    def test_deterministic(self, project_dir: Path):
        resolver = _resolver(project_dir)
        assert resolver.resolve() == resolver.resolve()


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestInvalidProject:
    @pytest.mark.unit
    def test_no_manifest(self, tmp_path: Path):
        with pytest.raises(InvalidProjectError) as exc_info:
            _resolver(tmp_path).resolve()
        assert exc_info.value.path == tmp_path.resolve()
        assert "no manifest" in str(exc_info.value)

    @pytest.mark.unit
    def test_malformed_toml(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'name = "unterminated\n')
        with pytest.raises(InvalidProjectError, match="malformed") as exc_info:
            _resolver(tmp_path).resolve()
        assert exc_info.value.path.name == "project.toml"

    @pytest.mark.unit
    def test_malformed_json(self, tmp_path: Path):
        (tmp_path / "package.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidProjectError, match="malformed"):
            _resolver(tmp_path).resolve()

    @pytest.mark.unit
    def test_malformed_yaml(self, tmp_path: Path):
        _write(tmp_path / "project.yaml", "name: [unclosed\n")
        with pytest.raises(InvalidProjectError, match="malformed"):
            _resolver(tmp_path).resolve()

    @pytest.mark.unit
    def test_json_array_is_not_a_table(self, tmp_path: Path):
        (tmp_path / "package.json").write_text('["name"]', encoding="utf-8")
        with pytest.raises(InvalidProjectError, match="metadata table"):
            _resolver(tmp_path).resolve()

    @pytest.mark.unit
    def test_cargo_without_package_table(self, tmp_path: Path):
        _write(tmp_path / "Cargo.toml", '[workspace]\nmembers = ["a"]\n')
        with pytest.raises(InvalidProjectError, match="metadata table"):
            _resolver(tmp_path).resolve()

    @pytest.mark.unit
    def test_missing_name(self, tmp_path: Path):
        _write(tmp_path / "project.toml", 'version = "1.0"\n')
        with pytest.raises(InvalidProjectError, match="name"):
            _resolver(tmp_path).resolve()

    @pytest.mark.parametrize("value", ['""', '"   "', "42"])
    @pytest.mark.unit
    def test_invalid_name_values(self, tmp_path: Path, value: str):
        _write(tmp_path / "project.toml", f"name = {value}\n")
        with pytest.raises(InvalidProjectError):
            _resolver(tmp_path).resolve()

    @pytest.mark.unit
    def test_invalid_utf8(self, tmp_path: Path):
        (tmp_path / "project.toml").write_bytes(b'name = "\xff\xfe"\n')
        with pytest.raises(InvalidProjectError, match="malformed"):
            _resolver(tmp_path).resolve()
