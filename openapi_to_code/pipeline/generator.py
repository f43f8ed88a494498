"""
Pipeline generator.

Runs the phases for one document and one target language:
parse, lift tuple variants, check references, render.
"""

from __future__ import annotations

import logging
from typing import Any

from .analyzer.reference_resolver import check_references
from .analyzer.variant_lifter import LiftRecord, lift_tuple_variants
from .backends import BACKENDS, CodeBackend
from .config import CodeGeneratorConfig
from .schema_ast.nodes import SchemaSpec
from .schema_ast.parser import SchemaParser

logger = logging.getLogger(__name__)


class PipelineGenerator:
    """Generates code for one OpenAPI document in one language."""

    def __init__(
        self,
        document: Any,
        config: CodeGeneratorConfig | None = None,
        language: str = "go",
        generation_comment: str = "",
    ):
        """
        Initialize the generator.

        Args:
            document: The decoded OpenAPI document
            config: Code generation configuration
            language: Target language, one of ``BACKENDS``
            generation_comment: Command line recorded in the file header
        """
        if language not in BACKENDS:
            raise ValueError(f"Language '{language}' is not supported")
        self.document = document
        self.config = config or CodeGeneratorConfig()
        self.language = language
        self.generation_comment = generation_comment
        self.backend: CodeBackend = BACKENDS[language](self.config)
        self.lift_records: list[LiftRecord] = []

    def build_spec(self) -> SchemaSpec:
        """Parse and lift, returning the spec the backend renders."""
        logger.info("parsing OpenAPI spec")
        parser = SchemaParser(self.config.name_prefixes, self.config.vendor_prefix)
        spec = parser.parse(self.document)

        policy = self.config.resolve_conflict_policy(self.backend.CONFLICT_POLICY)
        spec, self.lift_records = lift_tuple_variants(spec, policy)
        check_references(spec)
        return spec

    def generate(self) -> str:
        """Generate the code as a string. Nothing is returned on failure."""
        spec = self.build_spec()
        logger.info("generating code for %s", self.language)
        return self.backend.generate(spec, self.generation_comment)
