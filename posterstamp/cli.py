from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import typer

from posterstamp.config import load_config, optional_path, write_default_config
from posterstamp.constants import SUPPORTED_EXTENSIONS, TEMPLATE_DESCRIPTIONS
from posterstamp.errors import PosterError
from posterstamp.meta.extract import extract_metadata, read_metadata
from posterstamp.naming import build_output_name
from posterstamp.pipeline import render_bytes, resolve_template
from posterstamp.render.encoder import resolve_output_format

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Photo poster renderer with camera metadata caption.")
LOGGER = logging.getLogger("posterstamp")


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def _fail(message: str) -> typer.Exit:
    typer.secho(message, err=True, fg=typer.colors.RED)
    return typer.Exit(1)


def _resolve_quality(cfg: dict, quality: float | None, preview: bool) -> float:
    if quality is not None:
        return float(quality)
    key = "preview_quality" if preview else "quality"
    return float(cfg.get(key, 0.9))


@app.command()
def render(
    input_path: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    out: Path | None = typer.Option(None, "--out", help="Output directory (default: next to the input)."),
    template: str | None = typer.Option(None, "--template", help="classic | blur-background"),
    output_format: str | None = typer.Option(None, "--format", help="Output format: jpg|png"),
    quality: float | None = typer.Option(None, "--quality", min=0.0, max=1.0, help="JPEG quality in [0, 1]."),
    preview: bool = typer.Option(False, "--preview", help="Encode at the lighter preview_quality from the config."),
    name_template: str | None = typer.Option(None, "--name", help='Output filename template, e.g. "{stem}_{template}.{ext}"'),
    use_exiftool: str | None = typer.Option(None, "--use-exiftool", help="auto|on|off"),
    text_backend: str | None = typer.Option(None, "--text-backend", help="pillow|svg"),
    font: Path | None = typer.Option(None, "--font", help="TrueType font for the caption."),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Render a poster for one photo."""
    cfg = load_config()
    _setup_logging(log_level or str(cfg.get("log_level", "info")))

    if input_path.suffix.lower() not in SUPPORTED_EXTENSIONS:
        LOGGER.warning("Unrecognized extension %s, trying to decode anyway", input_path.suffix)

    fmt = output_format or str(cfg.get("output_format", "jpg"))
    try:
        _, _, out_ext = resolve_output_format(fmt)
    except ValueError as exc:
        raise _fail(str(exc))

    template_id = resolve_template(template or str(cfg.get("template")))
    quality_val = _resolve_quality(cfg, quality, preview)
    exiftool_mode = (use_exiftool or str(cfg.get("use_exiftool", "auto"))).lower()
    name_tmpl = name_template or str(cfg.get("name_template", "{stem}_poster.{ext}"))

    t0 = time.perf_counter()
    data = input_path.read_bytes()
    try:
        metadata = read_metadata(data, mode=exiftool_mode)
    except (PosterError, ValueError) as exc:
        raise _fail(f"Metadata reader failed: {exc}")
    try:
        encoded = render_bytes(
            data,
            metadata,
            template_id,
            output_format=out_ext,
            quality=quality_val,
            text_backend=text_backend or str(cfg.get("text_backend", "pillow")),
            font_path=font or optional_path(cfg.get("font_path")),
            bold_font_path=optional_path(cfg.get("bold_font_path")),
        )
    except (PosterError, ValueError) as exc:
        LOGGER.error("FAIL %s  %s", input_path.name, exc)
        raise _fail(f"Render failed: {exc}")

    try:
        output_name = build_output_name(name_tmpl, input_path, metadata, extension=out_ext, template_name=template_id)
    except ValueError as exc:
        raise _fail(str(exc))
    out_dir = out or input_path.parent
    out_dir.mkdir(parents=True, exist_ok=True)
    output_file = out_dir / output_name
    output_file.write_bytes(encoded.data)
    LOGGER.info("OK   %s -> %s  (%.2fs)", input_path.name, output_file.name, time.perf_counter() - t0)
    typer.echo(str(output_file))


@app.command("inspect")
def inspect_file(
    file: Path = typer.Argument(..., exists=True, resolve_path=True, dir_okay=False),
    use_exiftool: str = typer.Option("auto", "--use-exiftool", help="auto|on|off"),
    raw: bool = typer.Option(False, "--raw", help="Include raw metadata payload."),
) -> None:
    """Print the normalized metadata record of a photo as JSON."""
    data = file.read_bytes()
    mode = use_exiftool.lower()
    try:
        metadata = read_metadata(data, mode=mode)
    except (PosterError, ValueError) as exc:
        raise _fail(f"Metadata reader failed: {exc}")
    payload: dict = metadata.to_dict()
    if raw:
        try:
            payload["raw_metadata"] = extract_metadata(data, mode=mode)
        except Exception as exc:
            raise _fail(f"Metadata extraction failed: {exc}")
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=str))


@app.command("templates")
def list_templates() -> None:
    """List the available poster templates."""
    for name, description in TEMPLATE_DESCRIPTIONS.items():
        typer.echo(f"{name:<16} {description}")


@app.command("init-config")
def init_config(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config file."),
) -> None:
    path = write_default_config(force=force)
    typer.echo(f"Config initialized: {path}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
    log_level: str | None = typer.Option(None, "--log-level"),
) -> None:
    """Run the HTTP API."""
    import uvicorn

    from posterstamp.server import create_app

    cfg = load_config()
    level = log_level or str(cfg.get("log_level", "info"))
    _setup_logging(level)
    uvicorn.run(
        create_app(cfg),
        host=host or str(cfg.get("host", "127.0.0.1")),
        port=int(port or cfg.get("port", 8000)),
        log_level=level.lower(),
    )


def main() -> None:
    app()


if __name__ == "__main__":
    main()
