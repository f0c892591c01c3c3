"""Generator façade.

A :class:`Generator` binds a project directory and a template directory
once, then renders templates against the project's context and writes the
results.  It owns its template store, renderer and resolved context, and
releases them on :meth:`Generator.close` or when a ``with`` block exits.

Quick usage::

    from filegen import Generator

    with Generator("/path/to/project", "/path/to/templates") as gen:
        gen.generate_file("greeting.tmpl", "out/greeting.txt")
"""

from __future__ import annotations

import asyncio
import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from .config import GeneratorConfig
from .context import ContextResolver
from .errors import InvalidPathError, UseAfterCloseError, WriteFailedError
from .renderer import Renderer
from .store import StoreLoader, TemplateStore
from .utils import atomic_write_text, console, print_success


class GeneratorState(str, Enum):
    """Lifecycle of a generator."""
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


@dataclass(frozen=True)
class GeneratedFile:
    """Result of one successful ``generate_file`` call."""

    template: str
    path: Path
    size: int  # characters written


def _validate_dir(path: str | Path, label: str) -> Path:
    candidate = Path(path)
    if not candidate.exists():
        raise InvalidPathError(candidate, f"{label} does not exist")
    if not candidate.is_dir():
        raise InvalidPathError(candidate, f"{label} is not a directory")
    if not os.access(candidate, os.R_OK | os.X_OK):
        raise InvalidPathError(candidate, f"{label} is not readable")
    return candidate.resolve()


class Generator:
    """Renders templates from ``template_path`` into files for ``project_path``.

    Both paths are validated and fixed at construction.  The project context
    is resolved once, either eagerly at construction or on the first
    generation (see :attr:`GeneratorConfig.eager_context`), and reused for
    every later call.  A single instance may be shared between threads.

    Args:
        project_path: Root directory of the project whose manifest feeds the
            templates.  Relative destinations are written under it.
        template_path: Root directory containing the templates.
        config: Optional settings; defaults to ``GeneratorConfig()``.

    Raises:
        InvalidPathError: If either path is not an existing, readable
            directory.
        InvalidProjectError: If ``eager_context`` is set and the project
            manifest is missing or malformed.
    """

    def __init__(
        self,
        project_path: str | Path,
        template_path: str | Path,
        config: GeneratorConfig | None = None,
    ) -> None:
        self._state = GeneratorState.UNINITIALIZED
        self.config = config or GeneratorConfig()
        self._project_path = _validate_dir(project_path, "project path")
        self._template_path = _validate_dir(template_path, "template path")

        self._store = TemplateStore(
            self._template_path,
            encoding=self.config.encoding,
            cache=self.config.cache_templates,
        )
        self._renderer = Renderer(StoreLoader(self._store))
        self._resolver = ContextResolver(
            self._project_path,
            manifest_names=self.config.manifest_names,
            variables=self.config.variables,
        )
        self._context: Mapping[str, Any] | None = None
        self._context_lock = threading.Lock()

        if self.config.eager_context:
            self._resolve_context()
        self._state = GeneratorState.READY

    # -- Properties ----------------------------------------------------------

    @property
    def project_path(self) -> Path:
        return self._project_path

    @property
    def template_path(self) -> Path:
        return self._template_path

    @property
    def state(self) -> GeneratorState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._state is GeneratorState.CLOSED

    @property
    def context(self) -> Mapping[str, Any]:
        """The bound project context (read-only), resolved on first access."""
        self._check_open()
        return self._resolve_context()

    # -- Context -------------------------------------------------------------

    def _resolve_context(self) -> Mapping[str, Any]:
        context = self._context
        if context is not None:
            return context
        with self._context_lock:
            if self._state is GeneratorState.CLOSED:
                raise UseAfterCloseError()
            if self._context is None:
                resolved = self._resolver.resolve()
                self._context = MappingProxyType(resolved)
                if self.config.verbose:
                    console.print(
                        f"[dim]Resolved context for[/dim] [bold]{resolved['name']}[/bold] "
                        f"[dim]from {resolved['manifest']}[/dim]"
                    )
            return self._context

    # -- Generation ----------------------------------------------------------

    def generate_file(
        self,
        src_path: str | Path,
        dst_path: str | Path,
        extra: Mapping[str, Any] | None = None,
    ) -> GeneratedFile:
        """Render one template and write it to *dst_path*.

        Args:
            src_path: Template identifier, relative to ``template_path``.
            dst_path: Destination file.  Relative paths are resolved against
                ``project_path``.  Missing parent directories are created;
                an existing file is replaced.
            extra: Values overlaid on the bound context for this call only.

        Returns:
            A :class:`GeneratedFile` describing the written file.

        Raises:
            UseAfterCloseError: If the generator has been closed.
            TemplateNotFoundError, TraversalError, AccessDeniedError: If the
                template cannot be read.
            InvalidProjectError: If the project context cannot be resolved.
            TemplateSyntaxError: If the template cannot be parsed.
            UnboundPlaceholderError: If a placeholder has no value.
            TemplateRenderError: If template code fails while rendering.
            WriteFailedError: If the destination cannot be written.

        On failure the destination is left absent or unchanged.
        """
        self._check_open()
        identifier = Path(src_path).as_posix()
        context = self._resolve_context()
        if extra:
            context = {**context, **extra}

        content = self._renderer.render_template(identifier, context)

        destination = self._destination(dst_path)
        try:
            atomic_write_text(destination, content, encoding=self.config.encoding)
        except (OSError, UnicodeEncodeError, ValueError) as exc:
            raise WriteFailedError(destination, str(exc)) from exc

        if self.config.verbose:
            print_success(f"Generated {destination} from {identifier}")
        return GeneratedFile(template=identifier, path=destination, size=len(content))

    async def agenerate_file(
        self,
        src_path: str | Path,
        dst_path: str | Path,
        extra: Mapping[str, Any] | None = None,
    ) -> GeneratedFile:
        """Async variant of :meth:`generate_file`, run in a worker thread."""
        return await asyncio.to_thread(self.generate_file, src_path, dst_path, extra)

    def _destination(self, dst_path: str | Path) -> Path:
        destination = Path(dst_path)
        if not destination.is_absolute():
            destination = self._project_path / destination
        return destination

    # -- Lifecycle -----------------------------------------------------------

    def _check_open(self) -> None:
        if self._state is GeneratorState.CLOSED:
            raise UseAfterCloseError()

    def close(self) -> None:
        """Release cached templates and the resolved context.

        Calling ``close`` more than once is a no-op.
        """
        if self._state is GeneratorState.CLOSED:
            return
        with self._context_lock:
            self._state = GeneratorState.CLOSED
            self._context = None
        self._store.close()
        # no compiled-template caching once closed
        self._renderer.env.cache = None
        if self.config.verbose:
            console.print(f"[dim]Closed generator for {self._project_path}[/dim]")

    def __enter__(self) -> "Generator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return (
            f"Generator(project_path={str(self._project_path)!r}, "
            f"template_path={str(self._template_path)!r}, state={self._state.value!r})"
        )
