"""
Locating, fetching and decoding the OpenAPI document.

The document is found, in order of precedence, at an explicit path or URL,
at the path in the ``SPEC_FILE_PATH`` environment variable, or at the
``openapi_spec_url`` recorded in a Stainless stats file.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
import yaml

from .pipeline.errors import DocumentLoadError

logger = logging.getLogger(__name__)

SPEC_FILE_PATH_ENV = "SPEC_FILE_PATH"
DEFAULT_STATS_FILE = ".stats.yml"


def is_url(location: str) -> bool:
    parsed = urlparse(location)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def discover_spec_location(
    spec: str | None = None,
    stats_path: str | Path = DEFAULT_STATS_FILE,
    environ: Mapping[str, str] | None = None,
) -> str:
    """
    Decide where the OpenAPI document comes from.

    Args:
        spec: Explicit path or URL, used as is when given
        stats_path: Stainless stats file holding ``openapi_spec_url``
        environ: Environment to read ``SPEC_FILE_PATH`` from (defaults to os.environ)

    Returns:
        A file path or URL
    """
    if spec:
        return spec

    environ = os.environ if environ is None else environ
    if environ.get(SPEC_FILE_PATH_ENV):
        logger.info("reading OpenAPI spec from local file: %s", environ[SPEC_FILE_PATH_ENV])
        return environ[SPEC_FILE_PATH_ENV]

    logger.info("reading Stainless stats file")
    stats = _decode(_read_file(Path(stats_path)), str(stats_path))
    url = stats.get("openapi_spec_url") if isinstance(stats, Mapping) else None
    if not isinstance(url, str) or not url:
        raise DocumentLoadError(f"{stats_path} has no `openapi_spec_url`")
    logger.info("discovered OpenAPI spec url: %s", url)
    return url


def load_document(location: str, timeout: int = 30) -> Any:
    """
    Fetch or read the document at ``location`` and decode it.

    Both YAML and JSON documents are accepted.

    Raises:
        DocumentLoadError: If the document cannot be read or decoded
    """
    if is_url(location):
        logger.info("downloading OpenAPI spec")
        text = _fetch_url(location, timeout)
    else:
        text = _read_file(Path(location))
    return _decode(text, location)


def _read_file(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"cannot read {path}") from e


def _fetch_url(url: str, timeout: int) -> str:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise DocumentLoadError(f"cannot download {url}") from e
    return response.text


def _decode(text: str, source: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentLoadError(f"cannot decode {source}") from e
