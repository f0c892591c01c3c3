"""Jinja2 rendering with strict placeholders.

Templates use the Jinja2 syntax: ``{{ name }}`` substitutes a context value,
``{% if %}`` / ``{% for %}`` control output, and filters transform values.
A placeholder whose key is missing from the context fails the render with
:class:`~filegen.errors.UnboundPlaceholderError`; it never renders as empty
text.  To emit a delimiter verbatim write ``{{ '{{' }}`` or wrap the text in
``{% raw %}...{% endraw %}``.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Mapping

import jinja2
from jinja2 import BaseLoader, Environment, StrictUndefined, UndefinedError
from jinja2.utils import missing

from .errors import (
    GeneratorError,
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateSyntaxError,
    UnboundPlaceholderError,
)
from .utils import camel_case, pascal_case, slugify, snake_case


class PlaceholderUndefined(StrictUndefined):
    """``StrictUndefined`` that fails with the name of the missing key."""

    __slots__ = ()

    def __init__(
        self,
        hint: str | None = None,
        obj: Any = missing,
        name: str | None = None,
        exc: type[jinja2.TemplateRuntimeError] = UndefinedError,
    ) -> None:
        super().__init__(hint, obj, name, exc)
        self._undefined_exception = partial(UnboundPlaceholderError, name or "<unknown>")


class Renderer:
    """Renders template text against a context mapping.

    Rendering is a pure function of ``(template, context)``: the renderer
    holds no per-render state, so one instance can be shared across
    threads.
    """

    def __init__(self, loader: BaseLoader | None = None) -> None:
        self.env = Environment(
            loader=loader,
            undefined=PlaceholderUndefined,
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["slugify"] = slugify
        self.env.filters["pascal_case"] = pascal_case
        self.env.filters["snake_case"] = snake_case
        self.env.filters["camel_case"] = camel_case

    def render(self, source: str, context: Mapping[str, Any], *, name: str | None = None) -> str:
        """Render an inline template string.

        Args:
            source: Template text.
            context: Values available inside the template.
            name: Optional name used in error messages.
        """
        try:
            template = self.env.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateSyntaxError(name, exc.lineno, exc.message or str(exc)) from exc
        return self._render(template, context, name)

    def render_template(self, identifier: str, context: Mapping[str, Any]) -> str:
        """Load *identifier* through the configured loader and render it.

        Raises:
            TemplateNotFoundError: If the template (or an include) is missing.
            TemplateSyntaxError: If the template cannot be parsed.
            UnboundPlaceholderError: If a placeholder has no value.
            TemplateRenderError: If template code fails while rendering.
        """
        try:
            template = self.env.get_template(identifier)
        except jinja2.TemplateNotFound as exc:
            raise TemplateNotFoundError(exc.name or identifier) from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateSyntaxError(identifier, exc.lineno, exc.message or str(exc)) from exc
        return self._render(template, context, identifier)

    def _render(self, template: jinja2.Template, context: Mapping[str, Any], name: str | None) -> str:
        # Includes are loaded lazily, so their errors surface here.
        try:
            return template.render(dict(context))
        except jinja2.TemplateNotFound as exc:
            raise TemplateNotFoundError(str(exc.name)) from exc
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateSyntaxError(exc.name or exc.filename, exc.lineno, exc.message or str(exc)) from exc
        except GeneratorError:
            raise
        except Exception as exc:
            raise TemplateRenderError(name, _template_lineno(exc, template), str(exc)) from exc


def _template_lineno(exc: BaseException, template: jinja2.Template) -> int | None:
    """Line of *template* where *exc* was raised, from Jinja2's rewritten traceback."""
    lineno = None
    tb = exc.__traceback__
    while tb is not None:
        if tb.tb_frame.f_code.co_filename == (template.filename or "<template>"):
            lineno = tb.tb_lineno
        tb = tb.tb_next
    return lineno
