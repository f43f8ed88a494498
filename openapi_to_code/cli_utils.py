"""
CLI utilities for command line reconstruction and logging setup.
"""

import logging
import time
from pathlib import Path

import click

PROGRAM_NAME = "openapi_to_code"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct command line from current Click context using introspection.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        # No active context, return basic command
        return PROGRAM_NAME

    if not cli_args:
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME]
    arguments = []
    options = []

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if not value:
            continue

        # Logging switches do not change the output
        if param_name in ("verbose", "quiet"):
            continue

        if isinstance(value, (list, tuple)):
            values = [str(v) for v in value]
        elif isinstance(value, (str, Path)):
            path_obj = Path(str(value))
            values = [path_obj.name if path_obj.exists() else str(value)]
        else:
            values = [str(value)]

        if isinstance(param, click.Argument):
            arguments.extend(values)

        elif isinstance(param, click.Option):
            if hasattr(param, "default") and value == param.default:
                continue

            flag = param.opts[0] if param.opts else f"--{param_name}"
            if param.is_flag:
                options.append(flag)
                continue
            for v in values:
                options.extend([flag, v])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(cmd_parts)


class UtcIsoFormatter(logging.Formatter):
    """Formats records as ``[2024-01-01T12:00:00Z] message``."""

    converter = time.gmtime

    def __init__(self):
        super().__init__(fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%dT%H:%M:%SZ")


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Send package logs to stderr with UTC timestamps."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    handler = logging.StreamHandler()
    handler.setFormatter(UtcIsoFormatter())

    logger = logging.getLogger(PROGRAM_NAME)
    logger.handlers[:] = [handler]
    logger.setLevel(level)
    logger.propagate = False
