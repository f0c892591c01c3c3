"""Project context derivation.

A project exposes its metadata through a manifest file in its root
directory.  :class:`ContextResolver` finds the first known manifest, parses
it and derives the mapping of placeholder names that templates are rendered
against.

Supported manifests, searched in the configured order:

* ``project.toml``: flat top-level table (``name = "demo"``)
* ``pyproject.toml``: the ``[project]`` table, else ``[tool.poetry]``
* ``Cargo.toml``: the ``[package]`` table
* ``package.json``: the top-level object
* ``project.yaml`` / ``project.yml``: the top-level mapping

Any other configured name is parsed by its suffix (``.toml``, ``.json``,
``.yaml``/``.yml``) as a flat table.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .errors import InvalidProjectError
from .utils import camel_case, pascal_case, slugify, snake_case

DEFAULT_VERSION = "0.0.0"


# ---------------------------------------------------------------------------
# Manifest parsers
# ---------------------------------------------------------------------------


def _load_toml(path: Path) -> Any:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _load_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _load_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def _table(data: Any, *keys: str) -> Any:
    """Walk nested tables; ``None`` when any level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _pyproject_table(data: Any) -> Any:
    table = _table(data, "project")
    if table is None:
        table = _table(data, "tool", "poetry")
    return table


_MANIFEST_READERS: dict[str, tuple[Callable[[Path], Any], Callable[[Any], Any]]] = {
    "pyproject.toml": (_load_toml, _pyproject_table),
    "Cargo.toml": (_load_toml, lambda data: _table(data, "package")),
}

_SUFFIX_LOADERS: dict[str, Callable[[Path], Any]] = {
    ".toml": _load_toml,
    ".json": _load_json,
    ".yaml": _load_yaml,
    ".yml": _load_yaml,
}


# ---------------------------------------------------------------------------
# ContextResolver
# ---------------------------------------------------------------------------


class ContextResolver:
    """Derives the template context from a project directory.

    Resolution reads the filesystem every time it is called; callers that
    need a stable context for a session (the generator does) keep the
    result.
    """

    def __init__(
        self,
        project_path: str | Path,
        manifest_names: list[str],
        variables: Mapping[str, Any] | None = None,
    ) -> None:
        self.project_path = Path(project_path).resolve()
        self.manifest_names = list(manifest_names)
        self.variables = dict(variables or {})

    def find_manifest(self) -> Path:
        """Return the first manifest present in the project root.

        Raises:
            InvalidProjectError: If none of the configured names exist.
        """
        for name in self.manifest_names:
            candidate = self.project_path / name
            if candidate.is_file():
                return candidate
        raise InvalidProjectError(
            self.project_path,
            f"no manifest found (looked for {', '.join(self.manifest_names)})",
        )

    def load_metadata(self, manifest: Path) -> dict[str, Any]:
        """Parse *manifest* and return its project metadata table."""
        loader, select = _MANIFEST_READERS.get(manifest.name, (None, None))
        if loader is None:
            loader = _SUFFIX_LOADERS.get(manifest.suffix.lower())
            select = None
        if loader is None:
            raise InvalidProjectError(manifest, f"unsupported manifest format: {manifest.name}")

        try:
            data = loader(manifest)
        except (tomllib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError, UnicodeDecodeError) as exc:
            raise InvalidProjectError(manifest, f"malformed manifest: {exc}") from exc
        except OSError as exc:
            raise InvalidProjectError(manifest, f"cannot read manifest: {exc}") from exc

        table = select(data) if select is not None else data
        if not isinstance(table, dict):
            raise InvalidProjectError(manifest, "manifest does not contain a metadata table")

        name = table.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidProjectError(manifest, "manifest does not declare a project name")
        return table

    def resolve(self) -> dict[str, Any]:
        """Build the context mapping for the project.

        Every key of the manifest's metadata table is exposed as-is, then
        the derived keys are added and finally the configured static
        variables are applied on top.

        Raises:
            InvalidProjectError: If the manifest is missing or malformed.
        """
        manifest = self.find_manifest()
        metadata = self.load_metadata(manifest)
        name: str = metadata["name"].strip()

        version = metadata.get("version")
        description = metadata.get("description")

        context: dict[str, Any] = dict(metadata)
        context.update(
            {
                "name": name,
                "version": str(version) if isinstance(version, (str, int, float)) else DEFAULT_VERSION,
                "description": description if isinstance(description, str) else "",
                "name_snake": snake_case(name),
                "name_kebab": slugify(name),
                "name_pascal": pascal_case(name),
                "name_camel": camel_case(name),
                "project_path": self.project_path.as_posix(),
                "manifest": manifest.name,
                "project": metadata,
            }
        )
        context.update(self.variables)
        return context
