"""
Configuration for the code generator pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .analyzer.variant_lifter import ConflictPolicy
from .errors import CodegenError
from .schema_ast.parser import DEFAULT_VENDOR_PREFIX

DEFAULT_NAME_PREFIXES = ["Aggregate", "Expr", "Filter", "RankBy"]


@dataclass
class CodeGeneratorConfig:
    """Configuration options for code generation."""

    # Schemas whose name starts with one of these are generated
    name_prefixes: list[str] = field(default_factory=lambda: list(DEFAULT_NAME_PREFIXES))

    # Prefix of the vendor extension fields
    vendor_prefix: str = DEFAULT_VENDOR_PREFIX

    # "drop" or "append_suffix"; empty means the backend's default
    conflict_policy: str = ""

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Go package clause and import path of the JSON shim
    go_package: str = "turbopuffer"
    go_json_import: str = "github.com/turbopuffer/turbopuffer-go/internal/encoding/json"

    # Module unmanaged schemas are imported from (empty = no import)
    python_unmanaged_module: str = ""
    typescript_unmanaged_module: str = ""

    @staticmethod
    def from_dict(d: dict) -> CodeGeneratorConfig:
        """Create a config from a dictionary."""
        prefixes = d.get("name_prefixes", DEFAULT_NAME_PREFIXES)
        if not isinstance(prefixes, list) or not all(isinstance(p, str) for p in prefixes):
            raise CodegenError(f"`name_prefixes` must be a list of strings, got {prefixes!r}")
        config = CodeGeneratorConfig()
        for k, v in d.items():
            if hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert config to a dictionary."""
        return {
            "name_prefixes": self.name_prefixes,
            "vendor_prefix": self.vendor_prefix,
            "conflict_policy": self.conflict_policy,
            "add_generation_comment": self.add_generation_comment,
            "go_package": self.go_package,
            "go_json_import": self.go_json_import,
            "python_unmanaged_module": self.python_unmanaged_module,
            "typescript_unmanaged_module": self.typescript_unmanaged_module,
        }

    def resolve_conflict_policy(self, default: ConflictPolicy) -> ConflictPolicy:
        """The configured conflict policy, or ``default`` when unset."""
        if not self.conflict_policy:
            return default
        try:
            return ConflictPolicy(self.conflict_policy)
        except ValueError:
            choices = ", ".join(p.value for p in ConflictPolicy)
            raise CodegenError(f"unknown conflict policy {self.conflict_policy!r} (expected one of: {choices})") from None
