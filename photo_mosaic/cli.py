"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from photo_mosaic.config import MosaicConfig
from photo_mosaic.errors import MosaicError
from photo_mosaic.palette import load_palette
from photo_mosaic.pipeline import run

app = typer.Typer(
    name="photo-mosaic",
    help="Rebuild an image out of tiles drawn from a folder of pictures.",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False, markup=True)],
    )


# Defaults come from MosaicConfig - single source of truth
_DEFAULTS = MosaicConfig()


# -- generate command --------------------------------------------------

@app.command()
def generate(
    palette_dir: Path = typer.Option(
        ..., "--palette-dir", "-p",
        help="Folder of images to tile the output with",
    ),
    tile_size: int = typer.Option(
        ..., "--tile-size", "-s",
        help="Width and height of each tile in the output, in pixels",
    ),
    input_path: Path = typer.Option(
        ..., "--input", "-i", help="Image to reproduce",
    ),
    output_path: Path = typer.Option(
        ..., "--output", "-o", help="Where to write the mosaic",
    ),
    dither: bool = typer.Option(
        _DEFAULTS.dither, "--dither/--no-dither",
        help="Quantise and Floyd-Steinberg dither the input first",
    ),
    dither_colors: int = typer.Option(
        _DEFAULTS.dither_colors, "--dither-colors",
        help="Colours kept by the quantiser (2-256)",
    ),
    color_space: str = typer.Option(
        _DEFAULTS.color_space, "--color-space",
        help="'oklab', 'lab' or 'rgb' - space used for dithering",
    ),
    max_side: int | None = typer.Option(
        _DEFAULTS.max_side, "--max-side", "-m",
        help="Downscale the input so its longest side is at most this",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Build a photomosaic of INPUT from the tiles in PALETTE_DIR."""
    _setup_logging(verbose)

    cfg = MosaicConfig(
        palette_dir=palette_dir,
        tile_size=tile_size,
        input_path=input_path,
        output_path=output_path,
        dither=dither,
        dither_colors=dither_colors,
        color_space=color_space,
        max_side=max_side,
    )

    try:
        result = run(cfg)
    except MosaicError as exc:
        console.print(f"[bold red]error:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    w, h = result.source_size
    console.print(Panel.fit(
        f"[bold green]MOSAIC DONE[/bold green] - [bold]{result.output_path}[/bold]\n"
        f"Tiles: {result.num_tiles}  |  Source: {w}x{h}  |  "
        f"Output: {w * tile_size}x{h * tile_size}\n"
        f"Distinct colours: {result.queries}  |  Cache hits: {result.hits}  |  "
        f"Time: {result.elapsed:.1f}s",
        border_style="green",
    ))


# -- palette command ---------------------------------------------------

@app.command()
def palette(
    palette_dir: Path = typer.Option(..., "--palette-dir", "-p"),
    tile_size: int = typer.Option(_DEFAULTS.tile_size, "--tile-size", "-s"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """List the tiles found in PALETTE_DIR with their average colours."""
    _setup_logging(verbose)

    cfg = MosaicConfig(palette_dir=palette_dir, tile_size=tile_size)

    try:
        cfg.validate_palette()
        tiles = load_palette(palette_dir, tile_size, cfg.SUPPORTED_EXTENSIONS)
    except MosaicError as exc:
        console.print(f"[bold red]error:[/bold red] {exc}")
        raise typer.Exit(1) from exc

    table = Table(title=f"{palette_dir}  ({len(tiles)} tiles)")
    table.add_column("#", justify="right")
    table.add_column("Tile")
    table.add_column("Avg RGB")
    table.add_column("Oklab L, a, b")
    for i in range(len(tiles)):
        tile = tiles.tile(i)
        r, g, b = tile.pixels[..., :3].reshape(-1, 3).mean(axis=0)
        lab = ", ".join(f"{c:.3f}" for c in tile.color)
        name = str(tile.path.relative_to(palette_dir)) if tile.path else "-"
        table.add_row(str(i), name, f"{r:.0f}, {g:.0f}, {b:.0f}", lab)
    console.print(table)


if __name__ == "__main__":
    app()
