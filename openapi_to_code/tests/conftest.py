from __future__ import annotations

import logging
import sys
import types
from pathlib import Path

import pytest
import yaml

from openapi_to_code.cli_utils import PROGRAM_NAME
from openapi_to_code.pipeline import CodeGeneratorConfig, PipelineGenerator

TEST_DATA_DIR = Path(__file__).parent / "test_data"


def load_test_document(name: str = "openapi.yml"):
    with open(TEST_DATA_DIR / name, encoding="utf-8") as f:
        return yaml.safe_load(f)


def make_document(schemas: dict) -> dict:
    """Wrap a schema mapping in a minimal OpenAPI document."""
    return {"openapi": "3.1.0", "components": {"schemas": schemas}}


def generate(document, language: str, **config_values) -> str:
    config = CodeGeneratorConfig(add_generation_comment=False)
    for key, value in config_values.items():
        setattr(config, key, value)
    return PipelineGenerator(document, config, language).generate()


def load_generated_module(code: str, name: str = "generated_models") -> types.ModuleType:
    """Execute generated Python code as a module."""
    module = types.ModuleType(name)
    # dataclasses looks the defining module up in sys.modules
    sys.modules[name] = module
    try:
        exec(compile(code, f"<{name}>", "exec"), module.__dict__)
    finally:
        del sys.modules[name]
    return module


@pytest.fixture
def document():
    return load_test_document()


@pytest.fixture(autouse=True)
def reset_package_logger():
    # The CLI installs a handler bound to the stderr of the run that configured it
    logger = logging.getLogger(PROGRAM_NAME)
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate
