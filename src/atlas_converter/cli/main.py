"""CLI entry point: click group with the ``convert`` and ``info`` sub-commands."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

import click

from atlas_converter.core.config import ConfigManager, ConverterDefaults
from atlas_converter.core.exceptions import ConverterError
from atlas_converter.tools.plist_converter._emitters import Dialect
from atlas_converter.tools.plist_converter._plist import ExtractionStrategy

logger = logging.getLogger(__name__)

_TOOL_NAME = "plist_converter"
_DIALECT_CHOICES = [d.value for d in Dialect]
_STRATEGY_CHOICES = [s.value for s in ExtractionStrategy]


def _load_config(config_dir: str | None) -> ConfigManager:
    """Load TOML settings, reporting a broken file as a CLI error.

    Args:
        config_dir: Directory override, or ``None`` for the default location.

    Returns:
        The loaded config manager.

    Raises:
        click.ClickException: If a config file cannot be read or parsed.
    """
    config = ConfigManager(config_dir=Path(config_dir) if config_dir else None)
    try:
        config.load()
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Invalid configuration in '{config.config_dir}': {exc}"
        raise click.ClickException(msg) from exc
    return config


@click.group()
@click.version_option(package_name="atlas-converter")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Log debug details to stderr.")
def cli(verbose: bool) -> None:
    """Atlas Converter: turn TexturePacker .plist atlases into engine JSON."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command(name="convert")
@click.argument("plist", type=click.Path(dir_okay=False, resolve_path=True))
@click.option(
    "-d",
    "--dialect",
    "dialects",
    multiple=True,
    type=click.Choice(_DIALECT_CHOICES),
    help="Target schema; repeat for several (default: all).",
)
@click.option(
    "-s",
    "--strategy",
    default=None,
    type=click.Choice(_STRATEGY_CHOICES),
    help="Plist parser: 'strict' (default) or 'tolerant'.",
)
@click.option(
    "-o",
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, resolve_path=True),
    default=None,
    help="Output directory (default: next to the plist).",
)
@click.option("--dry-run", is_flag=True, default=False, help="Parse and emit without writing files.")
@click.option("-q", "--quiet", is_flag=True, default=False, help="Hide per-frame progress.")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/atlas-converter).",
)
def convert_cmd(
    plist: str,
    dialects: tuple[str, ...],
    strategy: str | None,
    output_dir: str | None,
    dry_run: bool,
    quiet: bool,
    config_dir: str | None,
) -> None:
    """Convert a .plist atlas into -pixi.json, -phaser.json and -pixijs.json files.

    Each JSON file is written next to PLIST with the .plist extension replaced.
    Frames with missing or malformed geometry are skipped with a warning.
    """
    from atlas_converter.core.events import EventBus
    from atlas_converter.tools.plist_converter import PlistConverterTool

    config = _load_config(config_dir)
    defaults = ConverterDefaults.from_config(config, tool=_TOOL_NAME)
    selected = list(dialects) or config.get("dialects", tool=_TOOL_NAME) or _DIALECT_CHOICES
    chosen_strategy = strategy or config.get("strategy", tool=_TOOL_NAME, default=ExtractionStrategy.STRICT.value)

    bus = EventBus()
    if not quiet:
        bus.subscribe("progress", lambda **kw: click.echo(f"  [{kw['current']:5d}/{kw['total']:5d}] {kw['message']}"))
    bus.subscribe("warning", lambda **kw: click.echo(f"  Warning: {kw['message']}", err=True))

    click.echo(f"Reading {plist}")
    tool = PlistConverterTool(event_bus=bus, defaults=defaults)
    try:
        result = tool.run(
            params={
                "input": Path(plist),
                "dialects": selected,
                "strategy": chosen_strategy,
                "output_dir": Path(output_dir) if output_dir else None,
                "dry_run": dry_run,
            },
        )
    except ConverterError as exc:
        logger.debug("Conversion of %s failed", plist, exc_info=True)
        raise click.ClickException(str(exc)) from exc

    meta = result.atlas.metadata
    verb = "Would write" if dry_run else "Wrote"
    for doc in result.outputs:
        click.echo(f"{verb} {doc.path}")
    click.echo(
        f"Converted {result.count} frames ({len(result.warnings)} skipped), "
        f"texture {meta.image} ({meta.size.w}x{meta.size.h})"
    )


@cli.command(name="info")
@click.argument("plist", type=click.Path(dir_okay=False, resolve_path=True))
@click.option(
    "-s",
    "--strategy",
    default=None,
    type=click.Choice(_STRATEGY_CHOICES),
    help="Plist parser: 'strict' (default) or 'tolerant'.",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: ~/.config/atlas-converter).",
)
def info_cmd(plist: str, strategy: str | None, config_dir: str | None) -> None:
    """Show what a .plist atlas contains without writing anything."""
    from atlas_converter.tools.plist_converter.logic import probe_plist

    config = _load_config(config_dir)
    defaults = ConverterDefaults.from_config(config, tool=_TOOL_NAME)
    chosen_strategy = strategy or config.get("strategy", tool=_TOOL_NAME, default=ExtractionStrategy.STRICT.value)

    try:
        info = probe_plist(Path(plist), strategy=chosen_strategy, defaults=defaults)
    except ConverterError as exc:
        raise click.ClickException(str(exc)) from exc

    width, height = info["size"]
    click.echo(f"Atlas: {Path(plist).name}")
    click.echo(f"Texture: {info['image']} ({width}x{height})")
    click.echo(f"Version: {info['version']}")
    click.echo(f"Frames: {info['frame_count']}")
    for warning in info["warnings"]:
        click.echo(f"  Warning: {warning}", err=True)
