"""Rich command-line interface powered by Typer."""

from __future__ import annotations

import logging
import time
from pathlib import Path

import numpy as np
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from lowreslove.adjustments import Adjustments
from lowreslove.config import ConverterConfig
from lowreslove.errors import LowResError
from lowreslove.image_io import (
    DEFAULT_EXPORT_NAME,
    load_image,
    make_comparison_grid,
    save_image,
)
from lowreslove.pipeline import PipelineResult, process_image, resample
from lowreslove.palette import PALETTES
from lowreslove.quantizer import extract_palette

app = typer.Typer(
    name="lowreslove",
    help="Turn photos into low-resolution, fixed-palette pixel art.",
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


def _collect_images(folder: Path, extensions: frozenset[str]) -> list[Path]:
    if not folder.exists():
        return []
    return sorted(
        f for f in folder.iterdir()
        if f.is_file() and f.suffix.lower() in extensions
    )


def _quality_metric(reference: np.ndarray, result: np.ndarray) -> float:
    """Mean RGB distance between the resampled source and the output."""
    r = reference[..., :3].reshape(-1, 3).astype(np.float64)
    q = result[..., :3].reshape(-1, 3).astype(np.float64)
    return float(np.mean(np.sqrt(np.sum((r - q) ** 2, axis=1))))


def _fail(err: Exception) -> None:
    console.print(f"[bold red]✗ {type(err).__name__}:[/bold red] {err}")
    raise typer.Exit(1)


def _save_outputs(
    cfg: ConverterConfig,
    source: np.ndarray,
    result: PipelineResult,
    high_res_path: Path,
) -> None:
    save_image(result.high_res, high_res_path)
    if cfg.save_low_res:
        save_image(
            result.low_res,
            high_res_path.with_name(f"{high_res_path.stem}_lowres{high_res_path.suffix}"),
        )
    if cfg.save_comparison:
        make_comparison_grid(
            source, result.low_res, result.high_res, result.palette,
            high_res_path.with_name(f"{high_res_path.stem}_comparison{high_res_path.suffix}"),
        )


# Defaults come from ConverterConfig - single source of truth
_DEFAULTS = ConverterConfig()

_ADJ_HELP = "Integer in [-10, 10]"


# -- batch command -----------------------------------------------------

@app.command()
def batch(
    input_dir: Path = typer.Option(
        _DEFAULTS.input_dir, "--input", "-i", help="Folder with source images",
    ),
    output_dir: Path = typer.Option(
        _DEFAULTS.output_dir, "--output", "-o", help="Results folder",
    ),
    width: int = typer.Option(
        _DEFAULTS.target_width, "--width", "-W", help="Bounding-box width",
    ),
    height: int = typer.Option(
        _DEFAULTS.target_height, "--height", "-H", help="Bounding-box height",
    ),
    palette: str = typer.Option(
        _DEFAULTS.palette, "--palette", "-p",
        help="Catalog palette name, or 'auto' to derive it from each image",
    ),
    colors: int = typer.Option(
        _DEFAULTS.num_colors, "--colors", "-k", help="Palette size for 'auto'",
    ),
    seed: int | None = typer.Option(
        _DEFAULTS.seed, "--seed", "-s", help="Clustering seed (None = random)",
    ),
    exposure: int = typer.Option(0, "--exposure", "-e", help=_ADJ_HELP),
    contrast: int = typer.Option(0, "--contrast", "-c", help=_ADJ_HELP),
    chrominance: int = typer.Option(0, "--chrominance", help=_ADJ_HELP),
    dithering: int = typer.Option(
        0, "--dithering", "-d", help="Error-diffusion strength; 0 disables",
    ),
    color_space: str = typer.Option(
        _DEFAULTS.color_space, "--color-space", help="'rgb' or 'lab'",
    ),
    upscale: int = typer.Option(
        _DEFAULTS.pixel_upscale, "--upscale", "-u", help="Pixel upscale factor",
    ),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
        help="Write a side-by-side comparison grid",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Convert all images in INPUT_DIR and write results to OUTPUT_DIR."""
    _setup_logging(verbose)
    logger = logging.getLogger("lowreslove")

    try:
        cfg = ConverterConfig(
            target_width=width,
            target_height=height,
            pixel_upscale=upscale,
            palette=palette,
            num_colors=colors,
            seed=seed,
            color_space=color_space,
            adjustments=Adjustments(exposure, contrast, chrominance, dithering),
            save_comparison=comparison,
            input_dir=input_dir,
            output_dir=output_dir,
        )
    except ValueError as err:
        _fail(err)

    input_dir.mkdir(exist_ok=True)
    output_dir.mkdir(exist_ok=True)

    images = _collect_images(input_dir, cfg.SUPPORTED_EXTENSIONS)
    if not images:
        console.print(f"\n[yellow]No images found in {input_dir}/[/yellow]")
        console.print("Place .jpg / .png / ... files there and re-run.\n")
        raise typer.Exit(0)

    adj = cfg.adjustments
    console.print(Panel.fit(
        f"[bold]LOWRESLOVE[/bold]\n"
        f"Box: {cfg.target_width}x{cfg.target_height}  |  Upscale: {cfg.pixel_upscale}\n"
        f"Palette: {cfg.palette}  |  Colour space: {cfg.color_space}\n"
        f"Exposure {adj.exposure:+d}  Contrast {adj.contrast:+d}  "
        f"Chrominance {adj.chrominance:+d}  Dithering {adj.dithering:+d}\n"
        f"Images: {len(images)}",
        border_style="cyan",
    ))

    failures = 0
    for idx, img_path in enumerate(images, 1):
        console.rule(f"[bold cyan][{idx}/{len(images)}] {img_path.name}[/bold cyan]")
        t_total = time.perf_counter()

        try:
            source = load_image(img_path)
            result = process_image(source, config=cfg)
        except (LowResError, OSError) as err:
            failures += 1
            logger.error("%s: %s", type(err).__name__, err)
            continue

        out_path = output_dir / f"{img_path.stem}.{cfg.output_format}"
        _save_outputs(cfg, source, result, out_path)

        w, h = result.size
        err = _quality_metric(resample(source, (w, h)), result.low_res)
        elapsed = time.perf_counter() - t_total
        console.print(
            f"  [green]✓[/green] {out_path.name}  "
            f"[dim]{w}x{h}  {result.palette.name}  {result.mode.value}"
            f"  error={err:.1f}  time={elapsed:.1f}s[/dim]"
        )

    if failures:
        console.print(Panel.fit(
            f"[bold yellow]DONE WITH {failures} FAILURE(S)[/bold yellow] - "
            f"results in [bold]{output_dir}/[/bold]",
            border_style="yellow",
        ))
        raise typer.Exit(1)

    console.print(Panel.fit(
        f"[bold green]ALL DONE[/bold green] - results in [bold]{output_dir}/[/bold]",
        border_style="green",
    ))


# -- single-image command ----------------------------------------------

@app.command()
def single(
    image: Path = typer.Argument(..., help="Path to the source image"),
    output: Path = typer.Option(
        Path("output") / DEFAULT_EXPORT_NAME, "--output", "-o",
    ),
    width: int = typer.Option(_DEFAULTS.target_width, "--width", "-W"),
    height: int = typer.Option(_DEFAULTS.target_height, "--height", "-H"),
    palette: str = typer.Option(_DEFAULTS.palette, "--palette", "-p"),
    colors: int = typer.Option(_DEFAULTS.num_colors, "--colors", "-k"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    exposure: int = typer.Option(0, "--exposure", "-e", help=_ADJ_HELP),
    contrast: int = typer.Option(0, "--contrast", "-c", help=_ADJ_HELP),
    chrominance: int = typer.Option(0, "--chrominance", help=_ADJ_HELP),
    dithering: int = typer.Option(0, "--dithering", "-d", help=_ADJ_HELP),
    color_space: str = typer.Option(_DEFAULTS.color_space, "--color-space"),
    upscale: int = typer.Option(_DEFAULTS.pixel_upscale, "--upscale", "-u"),
    low_res: bool = typer.Option(_DEFAULTS.save_low_res, "--low-res/--no-low-res"),
    comparison: bool = typer.Option(
        _DEFAULTS.save_comparison, "--comparison/--no-comparison",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Convert a single image."""
    _setup_logging(verbose)

    try:
        cfg = ConverterConfig(
            target_width=width,
            target_height=height,
            pixel_upscale=upscale,
            palette=palette,
            num_colors=colors,
            seed=seed,
            color_space=color_space,
            adjustments=Adjustments(exposure, contrast, chrominance, dithering),
            save_low_res=low_res,
            save_comparison=comparison,
        )
        source = load_image(image)
        result = process_image(source, config=cfg)
    except (ValueError, OSError) as err:
        _fail(err)

    _save_outputs(cfg, source, result, output)

    w, h = result.size
    console.print(
        f"[green]✓[/green] Saved to {output}  "
        f"[dim]{w}x{h} → {w * upscale}x{h * upscale}  "
        f"{result.palette.name}  {' '.join(result.palette.to_hex())}[/dim]"
    )


# -- catalog / extraction ----------------------------------------------

@app.command()
def palettes() -> None:
    """List the built-in palettes."""
    table = Table(title="Palettes", border_style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Colours")
    for name, pal in PALETTES.items():
        swatches = " ".join(f"[on {h}]  [/on {h}]" for h in pal.to_hex())
        table.add_row(name, swatches + "  [dim]" + " ".join(pal.to_hex()) + "[/dim]")
    console.print(table)


@app.command()
def extract(
    image: Path = typer.Argument(..., help="Image to derive the palette from"),
    colors: int = typer.Option(_DEFAULTS.num_colors, "--colors", "-k"),
    iterations: int = typer.Option(_DEFAULTS.max_iterations, "--iterations", "-n"),
    seed: int | None = typer.Option(_DEFAULTS.seed, "--seed", "-s"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Print the k-means palette of IMAGE as hex colours, dark to light."""
    _setup_logging(verbose)
    try:
        pal = extract_palette(
            load_image(image), k=colors, max_iterations=iterations, seed=seed,
        )
    except (ValueError, OSError) as err:
        _fail(err)
    for hex_color in pal.to_hex():
        console.print(f"[on {hex_color}]    [/on {hex_color}] {hex_color}")


if __name__ == "__main__":
    app()
