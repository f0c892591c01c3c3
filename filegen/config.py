"""filegen configuration.

Typed settings for a :class:`~filegen.generator.Generator`.  Pydantic v2
validates values at construction time and handles JSON round-trips, so the
same configuration can be stored next to a project or read from the
environment.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_MANIFEST_NAMES: list[str] = [
    "project.toml",
    "pyproject.toml",
    "Cargo.toml",
    "package.json",
    "project.yaml",
    "project.yml",
]


class GeneratorConfig(BaseModel):
    """Settings shared by the template store, context resolver and renderer.

    Instances are immutable once passed to a ``Generator``; the generator
    keeps its own reference for its whole lifetime.
    """

    manifest_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MANIFEST_NAMES),
        min_length=1,
        description="Manifest file names searched in order under the project root",
    )
    eager_context: bool = Field(
        default=False,
        description="Resolve the project context at construction instead of first use",
    )
    cache_templates: bool = Field(
        default=True, description="Cache template content for the generator's lifetime"
    )
    encoding: str = Field(default="utf-8", description="Encoding of templates and output files")
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Static values merged over the derived project context",
    )
    verbose: bool = Field(default=False, description="Print generation events to the console")

    model_config = ConfigDict(frozen=True)

    @field_validator("manifest_names")
    @classmethod
    def _plain_file_names(cls, value: list[str]) -> list[str]:
        for name in value:
            if not name or Path(name).name != name:
                raise ValueError(f"manifest name must be a bare file name: {name!r}")
        return value

    @field_validator("encoding")
    @classmethod
    def _known_encoding(cls, value: str) -> str:
        import codecs

        try:
            codecs.lookup(value)
        except LookupError as exc:
            raise ValueError(f"unknown encoding: {value!r}") from exc
        return value

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path that was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "GeneratorConfig":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        """Build a ``GeneratorConfig`` from environment variables.

        Recognised variables (all optional):
            FILEGEN_MANIFEST_NAMES (comma-separated), FILEGEN_EAGER_CONTEXT,
            FILEGEN_CACHE_TEMPLATES, FILEGEN_ENCODING, FILEGEN_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("FILEGEN_MANIFEST_NAMES"):
            kwargs["manifest_names"] = [
                n.strip() for n in os.environ["FILEGEN_MANIFEST_NAMES"].split(",") if n.strip()
            ]
        if os.environ.get("FILEGEN_EAGER_CONTEXT"):
            kwargs["eager_context"] = _env_flag(os.environ["FILEGEN_EAGER_CONTEXT"])
        if os.environ.get("FILEGEN_CACHE_TEMPLATES"):
            kwargs["cache_templates"] = _env_flag(os.environ["FILEGEN_CACHE_TEMPLATES"])
        if os.environ.get("FILEGEN_ENCODING"):
            kwargs["encoding"] = os.environ["FILEGEN_ENCODING"]
        if os.environ.get("FILEGEN_VERBOSE"):
            kwargs["verbose"] = _env_flag(os.environ["FILEGEN_VERBOSE"])
        return cls(**kwargs)


def _env_flag(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}
