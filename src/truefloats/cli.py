from __future__ import annotations

import json
import logging
from dataclasses import replace as dc_replace
from pathlib import Path

import typer
import yaml

from .config import TrueFloatsConfig, load_config
from .core import line_col, render_value, scan
from .datatypes import FloatBits, bits_from_hex, bits_of, format_reverse_calc, value_from_raw
from .literals import parse_literal

app = typer.Typer(help="Show the true binary64 value of float literals.", no_args_is_help=True)


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _resolve_config(
    config: Path | None,
    precision: int | None = None,
    show_hex: bool | None = None,
    show_all: bool = False,
) -> TrueFloatsConfig:
    cfg = load_config(config)
    overrides: dict[str, object] = {}
    if precision is not None:
        overrides["precision"] = precision
    if show_hex is not None:
        overrides["show_hex"] = show_hex
    if show_all:
        overrides["only_when_different"] = False
    if overrides:
        cfg = dc_replace(cfg, **overrides)
    return cfg


def _bits_payload(bits: FloatBits) -> dict[str, str]:
    return {
        "hex": bits.hex,
        "sign": bits.sign,
        "exponent": bits.exponent,
        "fraction": bits.fraction,
        "bits": bits.bit_text,
        "classification": bits.classification,
        "formula": format_reverse_calc(bits),
    }


@app.command("scan")
def scan_command(
    input_path: Path = typer.Argument(..., exists=True, readable=True, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
    precision: int | None = typer.Option(
        None, "--precision", "-p", help="Significant digits (clamped to 1-25)."
    ),
    show_hex: bool | None = typer.Option(
        None, "--show-hex/--no-show-hex", help="Include the IEEE-754 hex encoding."
    ),
    show_all: bool = typer.Option(
        False, "--all", help="Report literals even when they are already exact."
    ),
) -> None:
    """Print one JSON record per float literal whose true value differs."""
    cfg = _resolve_config(config, precision, show_hex, show_all)
    text = input_path.read_text(encoding="utf-8")
    records = []
    for record in scan(text, cfg):
        line, column = line_col(text, record.start)
        payload = record.to_dict()
        payload["line"] = line + 1
        payload["column"] = column + 1
        records.append(payload)
    typer.echo(json.dumps({"path": str(input_path), "literals": records}, indent=2))


@app.command("bits")
def bits_command(
    literal: str = typer.Argument(..., help="Decimal or hex-float literal."),
    precision: int = typer.Option(17, "--precision", "-p"),
) -> None:
    """Show the full-precision value and binary64 layout of a literal."""
    value = parse_literal(literal)
    if value is None:
        raise typer.BadParameter(f"Not a numeric literal: {literal!r}", param_hint="LITERAL")
    rendered = render_value(value, TrueFloatsConfig(precision=precision))
    payload: dict[str, object] = {"literal": literal, "full": rendered.full, "display": rendered.display}
    payload.update(_bits_payload(bits_of(value)))
    typer.echo(json.dumps(payload, indent=2))


@app.command("bits-from-hex")
def bits_from_hex_command(
    hex_text: str = typer.Argument(..., metavar="HEX", help="16 hex digits, 0x optional."),
) -> None:
    """Break a saved binary64 hex encoding into its fields."""
    bits = bits_from_hex(hex_text)
    if bits is None:
        typer.echo(f"Expected 16 hex digits, got {hex_text!r}.", err=True)
        raise typer.Exit(code=1)
    payload: dict[str, object] = _bits_payload(bits)
    payload["value"] = repr(value_from_raw(bits.raw))
    typer.echo(json.dumps(payload, indent=2))


@app.command("print-config")
def print_config(config: Path | None = typer.Option(None, "--config", "-c")) -> None:
    """Dump the effective configuration as YAML."""
    cfg = load_config(config)
    typer.echo(yaml.safe_dump(cfg.to_dict(), sort_keys=False))


@app.command("view")
def view(
    input_path: Path | None = typer.Argument(None, exists=True, readable=True, dir_okay=False),
    config: Path | None = typer.Option(None, "--config", "-c"),
) -> None:
    """Open the desktop viewer."""
    from .app import main as run_viewer

    run_viewer(config=load_config(config), path=input_path)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
