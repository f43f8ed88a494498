"""
Atomic file writer for generated code.

Ensures that an interrupted or invalid run never leaves a half-written
output file behind.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from .errors import OutputValidationError

logger = logging.getLogger(__name__)

_BRACKETS = {")": "(", "]": "[", "}": "{"}


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validators: dict[str, Callable[[str], None]] | None = None):
        """Initialize the atomic writer.

        Args:
            validators: Per-language validation functions, overriding the defaults
        """
        self._validators: dict[str, Callable[[str], None]] = {
            "python": validate_python,
            "go": validate_brackets,
            "typescript": validate_brackets,
        }
        if validators:
            self._validators.update(validators)

    def write(self, path: Path, content: str, language: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Args:
            path: Target file path
            content: Content to write
            language: Language for validation
            validate: Whether to validate before finalizing

        Raises:
            OutputValidationError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate and language in self._validators:
                self._validators[language](content)

            temp_path.replace(path)
            logger.info("wrote %s", path)
        except Exception:
            temp_path.unlink(missing_ok=True)
            raise


def validate_python(content: str) -> None:
    """Fail unless the content parses as Python."""
    try:
        ast.parse(content)
    except SyntaxError as e:
        raise OutputValidationError(f"Generated Python code is not valid: {e}") from e


def validate_brackets(content: str) -> None:
    """Fail unless braces, brackets and parentheses outside string literals balance."""
    stack: list[str] = []
    in_string = False
    escaped = False
    for line_number, line in enumerate(content.splitlines(), start=1):
        if line.lstrip().startswith("//"):
            continue
        for char in line:
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char in "([{":
                stack.append(char)
            elif char in _BRACKETS:
                if not stack or stack.pop() != _BRACKETS[char]:
                    raise OutputValidationError(f"Generated code has an unbalanced {char!r} on line {line_number}")
    if in_string:
        raise OutputValidationError("Generated code has an unterminated string literal")
    if stack:
        raise OutputValidationError(f"Generated code has {len(stack)} unclosed bracket(s)")
