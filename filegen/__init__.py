"""filegen -- template-driven file generation.

Binds a project directory (whose manifest supplies the template context) and
a template directory, then renders Jinja2 templates into files.

Quick usage::

    from filegen import Generator

    with Generator("./my-project", "./templates") as gen:
        gen.generate_file("README.md.j2", "README.md")
"""

from filegen.config import GeneratorConfig
from filegen.context import ContextResolver
from filegen.errors import (
    AccessDeniedError,
    GeneratorError,
    InvalidPathError,
    InvalidProjectError,
    TemplateNotFoundError,
    TemplateRenderError,
    TemplateSyntaxError,
    TraversalError,
    UnboundPlaceholderError,
    UseAfterCloseError,
    WriteFailedError,
)
from filegen.generator import GeneratedFile, Generator, GeneratorState
from filegen.renderer import Renderer
from filegen.store import StoreLoader, TemplateStore

__version__ = "0.1.0"

__all__ = [
    "AccessDeniedError",
    "ContextResolver",
    "GeneratedFile",
    "Generator",
    "GeneratorConfig",
    "GeneratorError",
    "GeneratorState",
    "InvalidPathError",
    "InvalidProjectError",
    "Renderer",
    "StoreLoader",
    "TemplateNotFoundError",
    "TemplateRenderError",
    "TemplateStore",
    "TemplateSyntaxError",
    "TraversalError",
    "UnboundPlaceholderError",
    "UseAfterCloseError",
    "WriteFailedError",
]
