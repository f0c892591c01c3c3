"""Template lookup under a fixed template root.

The :class:`TemplateStore` turns a relative template identifier into raw
template text.  Every identifier is resolved against the root and rejected
if it would land outside it, so neither a ``../`` segment nor a symlink can
make the engine read arbitrary files.  :class:`StoreLoader` exposes the
same lookup to Jinja2 so ``{% include %}`` and ``{% extends %}`` follow the
same rules.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path, PurePosixPath
from typing import Callable

from jinja2 import BaseLoader, Environment
from jinja2 import TemplateNotFound as JinjaTemplateNotFound

from .errors import AccessDeniedError, TemplateNotFoundError, TemplateSyntaxError, TraversalError


class TemplateStore:
    """Reads templates from a template root directory.

    Content may be cached per resolved absolute path until the store is
    closed.  Cache reads take no lock; insertion is serialised so
    concurrent first reads of the same template store one entry.
    """

    def __init__(self, root: str | Path, *, encoding: str = "utf-8", cache: bool = True) -> None:
        self.root = Path(root).resolve()
        self.encoding = encoding
        self.cache_enabled = cache
        self._cache: dict[Path, str] = {}
        self._lock = threading.Lock()
        self._closed = False

    # -- Resolution ----------------------------------------------------------

    def resolve(self, identifier: str | Path) -> Path:
        """Return the absolute path of *identifier* inside the root.

        Raises:
            TemplateNotFoundError: If the identifier is empty or not a valid
                file name.
            TraversalError: If the identifier is absolute or resolves
                (lexically or through symlinks) outside the root.
        """
        raw = str(identifier).replace("\\", "/")
        if not raw.strip():
            raise TemplateNotFoundError(raw)

        pure = PurePosixPath(raw)
        if pure.is_absolute() or (pure.parts and pure.parts[0].endswith(":")):
            raise TraversalError(raw, self.root)

        # Lexical check first so a missing path outside the root still
        # reports a traversal rather than a not-found.
        lexical = Path(os.path.normpath(self.root.joinpath(*pure.parts)))
        if not _is_within(lexical, self.root):
            raise TraversalError(raw, self.root)

        try:
            resolved = lexical.resolve()
        except ValueError as exc:
            # embedded NUL byte
            raise TemplateNotFoundError(raw) from exc
        if not _is_within(resolved, self.root):
            raise TraversalError(raw, self.root)
        return resolved

    # -- Reading -------------------------------------------------------------

    def read(self, identifier: str | Path) -> str:
        """Return the raw text of the template named by *identifier*.

        Raises:
            TemplateNotFoundError: If no regular file exists there.
            AccessDeniedError: If the file cannot be opened for reading.
            TemplateSyntaxError: If the file is not text in the configured
                encoding.
            TraversalError: See :meth:`resolve`.
        """
        path = self.resolve(identifier)
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        if not path.is_file():
            raise TemplateNotFoundError(identifier)
        try:
            content = path.read_text(encoding=self.encoding)
        except PermissionError as exc:
            raise AccessDeniedError(identifier) from exc
        except FileNotFoundError as exc:
            raise TemplateNotFoundError(identifier) from exc
        except UnicodeDecodeError as exc:
            raise TemplateSyntaxError(identifier, None, f"not valid {self.encoding} text") from exc

        if self.cache_enabled:
            with self._lock:
                if not self._closed:
                    content = self._cache.setdefault(path, content)
        return content

    def mtime(self, identifier: str | Path) -> float | None:
        """Modification time of the template file, or ``None`` if unavailable."""
        try:
            return self.resolve(identifier).stat().st_mtime
        except OSError:
            return None

    def clear(self) -> None:
        """Drop all cached template content."""
        with self._lock:
            self._cache.clear()

    def close(self) -> None:
        """Drop cached content and stop caching further reads."""
        with self._lock:
            self._closed = True
            self._cache.clear()

    # -- Utility -------------------------------------------------------------

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of every template file under *prefix*.

        Paths are relative to the template root and use ``/`` separators.
        """
        search_dir = self.resolve(prefix) if prefix else self.root
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.root).as_posix()
            for p in search_dir.rglob("*")
            if p.is_file() and _is_within(p.resolve(), self.root)
        )


class StoreLoader(BaseLoader):
    """Jinja2 loader that serves templates through a :class:`TemplateStore`.

    Missing templates are reported as Jinja2's own ``TemplateNotFound`` so
    ``{% include ... ignore missing %}`` keeps working; traversal and access
    errors propagate unchanged.
    """

    def __init__(self, store: TemplateStore) -> None:
        self.store = store

    def get_source(
        self, environment: Environment, template: str
    ) -> tuple[str, str | None, Callable[[], bool] | None]:
        try:
            source = self.store.read(template)
        except TemplateNotFoundError as exc:
            raise JinjaTemplateNotFound(template) from exc
        path = self.store.resolve(template)
        mtime = self.store.mtime(template)

        def uptodate() -> bool:
            return self.store.mtime(template) == mtime

        return source, str(path), uptodate

    def list_templates(self) -> list[str]:
        return self.store.list_templates()


def _is_within(path: Path, root: Path) -> bool:
    return path == root or root in path.parents
