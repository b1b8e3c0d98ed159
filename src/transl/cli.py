"""
Command line interface for transl using Click.

Commands:
    transl negotiate en ru de -l ja -l ru     Pick a language from a set
    transl resolve table.json -l ru           Resolve every key of a table file
    transl validate-config -c transl.yaml     Validate a YAML configuration
"""

import json
import sys
from pathlib import Path
from typing import Any

import click

from .config.loader import load_config
from .config.schema import AppConfig
from .core.context import parse_accept_language
from .core.errors import ConfigError, TableDecodeError
from .core.resolver import Translator
from .core.table import TranslationTable
from .logging import configure_logging

# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILED = 1
EXIT_CONFIG_ERROR = 3

_VERSION = "0.3.0"


def _config_option(func: Any) -> Any:
    return click.option(
        "-c",
        "--config",
        type=click.Path(exists=True, path_type=Path),
        help="Path to the YAML configuration file",
    )(func)


def _preference_options(func: Any) -> Any:
    func = click.option(
        "--accept-language",
        "accept_language",
        default=None,
        help="HTTP Accept-Language header, used when no --lang is given",
    )(func)
    func = click.option(
        "-l",
        "--lang",
        "langs",
        multiple=True,
        help="Preferred language, highest priority first (repeatable)",
    )(func)
    func = click.option("--default-language", default=None, help="Fallback language code")(func)
    func = click.option("-v", "--verbose", count=True, help="Increase log verbosity")(func)
    func = click.option(
        "--log-json", "json_output", is_flag=True, help="Render console logs as JSON lines"
    )(func)
    func = click.option("--quiet", is_flag=True, help="Disable console logging")(func)
    func = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Also write JSON logs (DEBUG and above) to this file",
    )(func)
    return func


def _load(
    config: Path | None, json_output: bool = False, quiet: bool = False, **cli_args: Any
) -> AppConfig:
    try:
        app_config = load_config(config_path=config, cli_args=cli_args)
    except ConfigError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    configure_logging(app_config.logging, json_output=json_output, quiet=quiet)
    return app_config


def _preferences(langs: tuple[str, ...], accept_language: str | None) -> list[str]:
    if langs:
        return list(langs)
    return parse_accept_language(accept_language)


@click.group()
@click.version_option(version=_VERSION, prog_name="transl")
def main() -> None:
    """transl - pick the best stored language for multilingual records."""
    pass


@main.command()
@click.argument("available", nargs=-1, required=True)
@_config_option
@_preference_options
def negotiate(available: tuple[str, ...], config: Path | None, **kwargs: Any) -> None:
    """Choose one of AVAILABLE language codes for the given preferences."""
    app_config = _load(
        config,
        json_output=kwargs["json_output"],
        quiet=kwargs["quiet"],
        default_language=kwargs["default_language"],
        verbose=kwargs["verbose"],
        log_file=kwargs["log_file"],
    )
    translator = Translator(app_config.translator)
    preferences = _preferences(kwargs["langs"], kwargs["accept_language"])

    result = translator.engine.negotiate(
        available,
        translator.engine.to_tags(preferences or [translator.default_language]),
        translator.default_language,
    )
    if result is None:
        click.echo("No available languages", err=True)
        sys.exit(EXIT_FAILED)

    click.echo(result.tag.code)
    if kwargs["verbose"]:
        click.echo(f"confidence: {result.confidence.name.lower()}", err=True)


@main.command()
@click.argument("table_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@_config_option
@_preference_options
@click.option(
    "--strategy",
    type=click.Choice(["independent", "unified"]),
    default=None,
    help="Negotiate per key (independent) or once for the whole table (unified)",
)
def resolve(table_file: Path, config: Path | None, **kwargs: Any) -> None:
    """Print the negotiated value of every key of a JSON translation table."""
    app_config = _load(
        config,
        json_output=kwargs["json_output"],
        quiet=kwargs["quiet"],
        default_language=kwargs["default_language"],
        strategy=kwargs["strategy"],
        verbose=kwargs["verbose"],
        log_file=kwargs["log_file"],
    )
    translator = Translator(app_config.translator)
    preferences = _preferences(kwargs["langs"], kwargs["accept_language"])

    try:
        table = TranslationTable.loads(table_file.read_bytes())
    except TableDecodeError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_FAILED)

    output: dict[str, dict[str, str]] = {}
    if app_config.translator.strategy == "unified":
        code = translator.select(table.languages(), preferences)
        for key, values in table.items():
            if code in values:
                output[key] = {"language": code, "value": values[code]}
    else:
        for key, values in table.items():
            code = translator.select(values, preferences)
            if code is not None:
                output[key] = {"language": code, "value": values[code]}

    click.echo(json.dumps(output, ensure_ascii=False, indent=2, sort_keys=True))


@main.command("validate-config")
@click.option(
    "-c",
    "--config",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Path to the configuration file to validate",
)
def validate_config(config: Path) -> None:
    """Validate a YAML configuration file."""
    try:
        app_config = load_config(config_path=config)
    except ConfigError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    click.echo("Valid configuration")
    click.echo(f"  Default language: {app_config.translator.default_language}")
    click.echo(f"  Strategy: {app_config.translator.strategy}")
    click.echo(f"  Strict: {app_config.translator.strict}")


if __name__ == "__main__":
    main()
