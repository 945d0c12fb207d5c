"""Command line host that feeds files through the asset pipeline."""

from __future__ import annotations

import logging
import pathlib
from typing import Dict, List, Optional

import typer
import yaml
from dotenv import load_dotenv

from assetpipe import get_version
from assetpipe.capabilities import CapabilityRegistry, build_registry
from assetpipe.config import Config, load_config
from assetpipe.core import Asset, Pipeline, PipelineResult
from assetpipe.errors import CapabilityRegistryError
from assetpipe.logging import LOGGER_NAME, configure_logging, log_file_of

app = typer.Typer(
    name="assetpipe",
    help="Convert and compress web assets.",
    no_args_is_help=True,
    add_completion=False,
)

config_app = typer.Typer(help="Configuration utilities.", no_args_is_help=True)
app.add_typer(config_app, name="config")

_POLICIES = ("abort", "fallback")


def _load_environment(env_file: Optional[pathlib.Path]) -> None:
    """Load environment variables from .env files."""

    if env_file is not None:
        load_dotenv(dotenv_path=env_file, override=True)
    else:
        load_dotenv(override=False)


def _prepare_logging(
    config: Config,
    override_path: Optional[pathlib.Path],
    override_level: Optional[str],
) -> tuple[logging.Logger, pathlib.Path]:
    """Configure logging based on configuration and overrides."""

    configured_path = override_path or config.logging.path
    configured_level = (override_level or config.logging.level).upper()
    try:
        logger = configure_logging(
            log_path=configured_path,
            level=configured_level,
            mirror_to_console=False,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--log-level") from exc
    log_file = log_file_of(logger) or pathlib.Path.cwd() / f"{LOGGER_NAME}.log"
    return logger, log_file


def _build_registry(config: Config) -> CapabilityRegistry:
    try:
        return build_registry(
            config.pipeline.capabilities,
            include_entrypoints=config.pipeline.load_entrypoints,
        )
    except KeyError as exc:
        typer.echo(f"Configuration error: {exc.args[0]}", err=True)
        raise typer.Exit(code=2) from exc
    except CapabilityRegistryError as exc:
        typer.echo(f"Capability registry error: {exc}", err=True)
        raise typer.Exit(code=2) from exc


def _read_asset(path: pathlib.Path) -> Asset:
    return Asset(content=path.read_bytes(), extension=path.suffix, name=str(path))


def _output_path(source: Asset, output: Asset, output_dir: pathlib.Path) -> pathlib.Path:
    stem = pathlib.Path(source.name).stem
    return output_dir / f"{stem}{output.extension}"


def _plan_outputs(
    results: List[PipelineResult], output_dir: pathlib.Path
) -> Dict[int, pathlib.Path]:
    """Map each writable result to its target, keyed by position in `results`."""

    targets: Dict[int, pathlib.Path] = {}
    for index, result in enumerate(results):
        if result.asset is not None:
            targets[index] = _output_path(result.source, result.asset, output_dir)
    return targets


def _version_callback(value: bool) -> None:
    """Print the package version and exit when requested."""

    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def main(  # pragma: no cover - exercised via CLI invocation
    ctx: typer.Context,
    config: Optional[pathlib.Path] = typer.Option(
        None,
        "--config",
        metavar="PATH",
        help="Path to YAML configuration file (used exclusively).",
    ),
    env_file: Optional[pathlib.Path] = typer.Option(
        None,
        "--env-file",
        metavar="PATH",
        help="Load environment variables from .env-style file before execution.",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        metavar="LEVEL",
        help="Override the configured log level (debug, info, warn, error).",
    ),
    log_path: Optional[pathlib.Path] = typer.Option(
        None,
        "--log-path",
        metavar="PATH",
        help="Override the base directory or file for log output.",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show assetpipe version and exit.",
    ),
) -> None:
    """CLI root; loads configuration, logging and the capability registry."""

    ctx.ensure_object(dict)
    _load_environment(env_file)

    try:
        config_obj = load_config(config)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc

    logger, log_file = _prepare_logging(config_obj, log_path, log_level)

    ctx.obj.update(
        {
            "config": config_obj,
            "config_path": config,
            "logger": logger,
            "log_file": log_file,
        }
    )


@app.command()
def build(
    ctx: typer.Context,
    paths: List[pathlib.Path] = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Source files to process.",
    ),
    output_dir: Optional[pathlib.Path] = typer.Option(
        None,
        "--output-dir",
        "-o",
        metavar="DIR",
        help="Directory for processed files (defaults to outputs.base_path).",
    ),
    on_compression_failure: Optional[str] = typer.Option(
        None,
        "--on-compression-failure",
        metavar="POLICY",
        help="abort: treat the asset as failed; fallback: write the uncompressed output.",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        min=1,
        help="Number of assets processed in parallel.",
    ),
) -> None:
    """Convert and compress each file, writing results under the output directory."""

    config: Config = ctx.obj["config"]
    logger: logging.Logger = ctx.obj["logger"]

    policy = (on_compression_failure or config.pipeline.on_compression_failure).strip().lower()
    if policy not in _POLICIES:
        raise typer.BadParameter(
            f"Expected one of {', '.join(_POLICIES)}, got {on_compression_failure!r}.",
            param_hint="--on-compression-failure",
        )

    registry = _build_registry(config)
    pipeline = Pipeline(registry=registry, logger=logging.getLogger(f"{LOGGER_NAME}.pipeline"))

    destination = output_dir or config.outputs.base_path
    if not destination.is_absolute():
        destination = pathlib.Path.cwd() / destination
    destination.mkdir(parents=True, exist_ok=True)

    assets = [_read_asset(path) for path in paths]
    logger.info("Building %s asset(s) into %s.", len(assets), destination)
    summary = pipeline.process_all(
        assets,
        max_workers=workers or config.pipeline.max_workers,
        fallback_on_compression_failure=policy == "fallback",
    )

    targets = _plan_outputs(summary.results, destination)
    claimed: Dict[pathlib.Path, List[int]] = {}
    for index, target in targets.items():
        claimed.setdefault(target, []).append(index)

    succeeded = degraded = failed = 0
    for index, result in enumerate(summary.results):
        if result.asset is None:
            failed += 1
            typer.echo(f"FAILED    {result.source.name}: {result.error}", err=True)
            continue

        target = targets[index]
        others = [summary.results[other].source.name for other in claimed[target] if other != index]
        if others:
            failed += 1
            typer.echo(
                f"FAILED    {result.source.name}: output collides with {', '.join(others)} "
                f"at {target}",
                err=True,
            )
            continue

        content = result.asset.content
        if isinstance(content, str):
            target.write_text(content, encoding="utf-8")
        else:
            target.write_bytes(content)
        if result.degraded:
            degraded += 1
            status = "DEGRADED"
        else:
            succeeded += 1
            status = result.asset.state.value.upper()
        typer.echo(f"{status:<10}{result.source.name} -> {target}")

    typer.echo(f"{succeeded} succeeded, {degraded} degraded, {failed} failed.")
    if failed:
        raise typer.Exit(code=1)


@app.command()
def capabilities(ctx: typer.Context) -> None:
    """List the converters and compressors registered at startup."""

    registry = _build_registry(ctx.obj["config"])
    if not len(registry):
        typer.echo("No capabilities registered.")
        return
    for capability in registry.capabilities():
        typer.echo(
            f"{capability.kind.value:<11}{capability.handled_extension:<8}"
            f"-> {capability.output_extension:<8}{capability.name}"
        )


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Print the merged configuration as YAML."""

    config: Config = ctx.obj["config"]
    for source in config.loaded_from:
        typer.echo(f"# loaded from {source}")
    typer.echo(yaml.safe_dump(dict(config.model_dump()), sort_keys=False).rstrip())
