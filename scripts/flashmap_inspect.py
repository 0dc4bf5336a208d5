#!/usr/bin/env python3
"""Print the region map of one or more firmware images."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import typer
from redlog import Level, field, get_logger, set_level

from flashmap import DeviceInfo, FlashmapError, LayoutConfig, open_workspace
from flashmap.regions import format_range


CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
APP_NAME = "flashmap-inspect"
app = typer.Typer(
    name=APP_NAME,
    help=f"{APP_NAME}: show how firmware images map onto a device",
    no_args_is_help=True,
    context_settings=CONTEXT_SETTINGS,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
)


def configure_logging(verbosity: int) -> None:
    level = Level(min(Level.INFO + verbosity, Level.ANNOYING))
    set_level(level)


def parse_address(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value, 0)
    except ValueError as exc:
        raise typer.BadParameter(f"not an address: {value}") from exc


@app.command()
def inspect(
    images: List[Path] = typer.Argument(..., help="HEX, ELF or BIN files"),
    rom_size: Optional[str] = typer.Option(
        None, "--rom-size", help="Device ROM size (omit to skip classification)"
    ),
    page_size: str = typer.Option("0x1000", "--page-size", help="Flash page size"),
    uicr_base: str = typer.Option(
        "0x10001000", "--uicr-base", help="UICR base address"
    ),
    bootloader: Optional[str] = typer.Option(
        None, "--bootloader", "-b", help="Bootloader start address"
    ),
    softdevice_size: Optional[str] = typer.Option(
        None, "--softdevice-size", "-s", help="Size of the SoftDevice"
    ),
    raw: bool = typer.Option(
        False, "--raw", help="Skip application/bootloader merging"
    ),
    verbose: int = typer.Option(
        0, "--verbose", "-v", count=True, help="Increase log verbosity"
    ),
):
    """Load images and print regions, overlaps and warnings."""

    configure_logging(verbose)
    log = get_logger("flashmap.inspect")

    device = None
    if rom_size is not None:
        device = DeviceInfo(
            rom_size=parse_address(rom_size),
            page_size=parse_address(page_size),
            uicr_base_address=parse_address(uicr_base),
            bootloader_address=parse_address(bootloader),
            softdevice_size=parse_address(softdevice_size),
        )
    log.info("device", field("info", repr(device)))

    try:
        workspace = open_workspace(
            *[image.expanduser() for image in images],
            device=device,
            config=LayoutConfig(reconcile=not raw),
        )
    except (FlashmapError, OSError) as exc:
        log.err(f"could not load images: {exc}")
        raise typer.Exit(code=1)

    layout = workspace.layout
    typer.echo(f"{len(layout.regions)} regions, {layout.total_size} bytes to write")
    for region in layout.regions:
        sources = ", ".join(sorted(Path(s).name for s in region.sources))
        typer.echo(
            f"  {region.name.value:<12} {format_range(region.start, region.end)}"
            f"  [{sources}]"
        )
    for finding in layout.findings:
        owners = ", ".join(Path(s).name for s in finding.sources)
        typer.echo(f"  overlap {format_range(finding.start, finding.end)}  [{owners}]")
    if layout.mcuboot_key:
        typer.echo(f"  mcuboot image: {layout.mcuboot_key}")
    for warning in layout.warnings:
        typer.echo(f"warning: {warning}")


if __name__ == "__main__":
    app()
