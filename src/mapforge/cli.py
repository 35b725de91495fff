"""Typer CLI entrypoint for mapforge."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from mapforge.cache import ArtifactCache
from mapforge.config import ConfigError, MapGeneratorConfig, load_config
from mapforge.errors import MapGeneratorError
from mapforge.naming import is_generated_name
from mapforge.service import MapGeneratorService
from mapforge.tasks import ThreadPoolTaskRunner

app = typer.Typer(help="Versioned map generator orchestration")
_CONSOLE = Console()
_LOGGING_CONFIGURED = False

_ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", help="YAML or JSON config file."),
]


def configure_logging(level: int = logging.INFO) -> None:
    """Configure Rich-backed logging once for CLI commands."""
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if _LOGGING_CONFIGURED:
        return
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    _LOGGING_CONFIGURED = True


def _load_config_or_exit(config_file: Path | None) -> MapGeneratorConfig:
    if config_file is None:
        return MapGeneratorConfig()
    try:
        return load_config(config_file)
    except ConfigError as exc:
        _CONSOLE.print(f"[bold red]{exc}[/bold red]")
        raise typer.Exit(code=2) from exc


@app.command()
def generate(
    map_name: Annotated[
        str | None, typer.Argument(help="Generated map name to regenerate.")
    ] = None,
    version: Annotated[
        str | None, typer.Option("--version", help="Generator version.")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Generation seed.")] = None,
    config_file: _ConfigOption = None,
) -> None:
    """Generate one map and print its name."""
    configure_logging()
    config = _load_config_or_exit(config_file)
    with ThreadPoolTaskRunner(max_workers=config.max_workers) as runner:
        service = MapGeneratorService.from_config(config, task_runner=runner)
        try:
            if map_name is not None:
                future = service.generate_map_from_name(map_name)
            elif seed is not None:
                future = service.generate_map_for(
                    config.default_version if version is None else version, seed
                )
            else:
                future = service.generate_map(version)
            result = future.result()
        except MapGeneratorError as exc:
            _CONSOLE.print(f"[bold red]{exc.code.value}: {exc}[/bold red]")
            raise typer.Exit(code=1) from exc
    _CONSOLE.print(result)


@app.command()
def check(map_name: Annotated[str, typer.Argument(help="Name to test.")]) -> None:
    """Exit 0 when MAP_NAME is a generated map name, 1 otherwise."""
    if is_generated_name(map_name):
        _CONSOLE.print(f"{map_name}: generated")
        return
    _CONSOLE.print(f"{map_name}: not generated")
    raise typer.Exit(code=1)


@app.command()
def sweep(config_file: _ConfigOption = None) -> None:
    """Delete leftover generated maps from the custom maps directory."""
    configure_logging()
    config = _load_config_or_exit(config_file)
    if config.custom_maps_dir is None:
        _CONSOLE.print("No custom maps directory configured; nothing to sweep.")
        return
    report = ArtifactCache(config.generator_executable_dir).sweep_stale_outputs(
        config.custom_maps_dir
    )
    _CONSOLE.print(f"deleted={len(report.deleted)} failed={len(report.failed)}")
    if report.failed:
        raise typer.Exit(code=1)


def main() -> None:
    """Run mapforge CLI."""
    app()


if __name__ == "__main__":
    main()
