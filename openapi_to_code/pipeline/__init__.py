"""
Pipeline - OpenAPI schema to typed data-model generator.

1. Phase 1 (Parser): Parse components.schemas strictly into the schema algebra
2. Phase 2 (Analyzer): Lift tuple variants of unions into named schemas
   and check every reference
3. Phase 3 (Backend): Render declarations, constructors and serializers
4. Phase 4 (Writer): Optionally validate and write the output atomically
"""

from __future__ import annotations

from .config import CodeGeneratorConfig
from .errors import (
    CodegenError,
    DocumentLoadError,
    OutputValidationError,
    RenderError,
    SchemaNamingError,
    SchemaParseError,
    SchemaReferenceError,
    UnsupportedSchemaError,
)
from .generator import PipelineGenerator
from .writer import AtomicWriter

__all__ = [
    "PipelineGenerator",
    "CodeGeneratorConfig",
    "AtomicWriter",
    "CodegenError",
    "DocumentLoadError",
    "OutputValidationError",
    "RenderError",
    "SchemaNamingError",
    "SchemaParseError",
    "SchemaReferenceError",
    "UnsupportedSchemaError",
]
