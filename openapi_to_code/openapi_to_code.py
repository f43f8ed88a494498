import json
import logging
import sys
from pathlib import Path

import click

from .cli_utils import configure_logging, reconstruct_command_line
from .loader import DEFAULT_STATS_FILE, discover_spec_location, load_document
from .pipeline import AtomicWriter, CodeGeneratorConfig, CodegenError, PipelineGenerator
from .pipeline.backends import BACKENDS
from .pipeline.errors import DocumentLoadError, format_error_chain

logger = logging.getLogger(__name__)


@click.command()
@click.argument("language", type=click.Choice(sorted(BACKENDS)))
@click.option("--spec", "-s", default=None, type=str, help="Path or URL of the OpenAPI document")
@click.option(
    "--stats",
    default=DEFAULT_STATS_FILE,
    type=click.Path(dir_okay=False),
    help="Stainless stats file holding openapi_spec_url, used when neither --spec nor SPEC_FILE_PATH is set",
)
@click.option("--config", "-c", default=None, type=click.Path(exists=True, resolve_path=True))
@click.option(
    "--name-prefix",
    "-p",
    "name_prefixes",
    multiple=True,
    help="Generate schemas whose name starts with this prefix (repeatable, overrides config)",
)
@click.option("--conflict-policy", default=None, type=click.Choice(["drop", "append_suffix"]))
@click.option("--output", "-o", default=None, type=click.Path(dir_okay=False, resolve_path=True))
@click.option("--verbose", "-v", is_flag=True, default=False)
@click.option("--quiet", "-q", is_flag=True, default=False)
def openapi_to_code(language, spec, stats, config, name_prefixes, conflict_policy, output, verbose, quiet):
    """Generate LANGUAGE data-model code from an OpenAPI document."""
    configure_logging(verbose=verbose, quiet=quiet)

    try:
        config = load_config(config)

        # CLI flags override the config file
        if name_prefixes:
            config.name_prefixes = list(name_prefixes)
        if conflict_policy:
            config.conflict_policy = conflict_policy

        location = discover_spec_location(spec, stats)
        document = load_document(location)

        codegen = PipelineGenerator(document, config, language, reconstruct_command_line(openapi_to_code))
        out = codegen.generate()

        if output is None:
            click.echo(out, nl=False)
        else:
            AtomicWriter().write(Path(output), out, language)
    except CodegenError as e:
        click.echo(f"error: {format_error_chain(e)}", err=True)
        sys.exit(1)


def load_config(path: str | None) -> CodeGeneratorConfig:
    """Read a JSON config file, or return the defaults when no path is given."""
    if path is None:
        return CodeGeneratorConfig()
    try:
        with open(path) as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DocumentLoadError(f"cannot load config {path}") from e
    if not isinstance(data, dict):
        raise DocumentLoadError(f"config {path} must be a JSON object")
    return CodeGeneratorConfig.from_dict(data)
