"""
Error types raised by the code generation pipeline.

Every failure is fatal to the current run. Errors are chained with
``raise ... from ...`` so the caller can report the whole chain, from the
schema that failed down to the offending construct.
"""

from __future__ import annotations


class CodegenError(Exception):
    """Base class for all pipeline errors."""


class DocumentLoadError(CodegenError):
    """The source document could not be located, fetched or decoded."""


class SchemaParseError(CodegenError):
    """A node matches none of the permitted shapes, or has an unknown field."""


class SchemaReferenceError(CodegenError):
    """A ``$ref`` target cannot be resolved against the known schemas."""


class SchemaNamingError(CodegenError):
    """Two schemas ended up with the same name."""


class UnsupportedSchemaError(CodegenError):
    """A well-formed schema the active renderer cannot express."""


class RenderError(CodegenError):
    """Rendering a top-level declaration failed."""


class OutputValidationError(CodegenError):
    """Generated code failed validation before being written."""


def format_error_chain(error: BaseException) -> str:
    """Join an exception and all of its causes as ``outer: inner: root``."""
    parts = [str(error)]
    cause = error.__cause__
    while cause is not None:
        parts.append(str(cause))
        cause = cause.__cause__
    return ": ".join(parts)
