"""OpenAPI schema to typed data-model code generator

Turns the whitelisted subset of an OpenAPI document's schemas into
data-model types, constructors and wire serializers for Go, Python and
TypeScript.
"""

__version__ = "1.0.0"

from .pipeline import (
    AtomicWriter,
    CodegenError,
    CodeGeneratorConfig,
    PipelineGenerator,
)

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "CodegenError",
    "AtomicWriter",
]
