"""
HashMangle — Command Interface
===============================
Runs the private-to-property pass over a single build artifact and keeps
its source map in step.

Commands:
  convert     — Rewrite one script (and its source map, if any)
  transforms  — List registered transforms

Usage:
  hashmangle convert out/main.js
  hashmangle convert out/main.ts --output dist/main.ts --source-map out/main.ts.map

Environment:
  HASHMANGLE_LOG_LEVEL      — logging level (default INFO)
  HASHMANGLE_TELEMETRY_DIR  — append conversion stats to <dir>/telemetry.jsonl
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hashmangle.models import ConversionResult, ScriptLanguage, TransformType
from hashmangle.sourcemap.adjust import adjust_raw_source_map
from hashmangle.sourcemap.vlq import SourceMapError
from hashmangle.syntax.ts_parser import ScriptSyntaxError, language_for_filename
from hashmangle.telemetry.collector import TelemetryCollector
from hashmangle.transforms.base import apply_transform, list_transforms

# Auto-register transforms
import hashmangle.transforms.private_to_property  # noqa

# Configure logging
logging.basicConfig(
    level=os.environ.get("HASHMANGLE_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)

console = Console()
app = typer.Typer(name="hashmangle", help="Rename native #private members to short unique properties")


# ── Commands ─────────────────────────────────────────────────────────────────

@app.command(name="convert")
def cmd_convert(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Script to rewrite"),
    output: Optional[Path] = typer.Option(None, help="Write rewritten code here instead of in place"),
    source_map: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Source map of INPUT (default: INPUT.map if present)"),
    map_output: Optional[Path] = typer.Option(None, help="Write the adjusted source map here"),
    language: Optional[ScriptLanguage] = typer.Option(None, case_sensitive=False, help="Grammar (default: from file extension)"),
    strict: bool = typer.Option(False, help="Fail on syntax errors instead of recovering"),
    telemetry_dir: Optional[Path] = typer.Option(None, envvar="HASHMANGLE_TELEMETRY_DIR", help="Directory for telemetry.jsonl"),
):
    """Rewrite #private members of one script to $-prefixed properties."""
    code = input_path.read_text(encoding="utf-8")
    params = {
        "filename": str(input_path),
        "language": language or language_for_filename(input_path.name),
        "strict": strict,
    }

    try:
        result, description = apply_transform(code, TransformType.PRIVATE_TO_PROPERTY, params)
    except ScriptSyntaxError as e:
        console.print(f"[bold red]Parse failed: {e}[/bold red]")
        raise typer.Exit(1)

    target = output or input_path
    map_path = source_map
    if map_path is None:
        candidate = input_path.with_name(input_path.name + ".map")
        map_path = candidate if candidate.exists() else None

    # Map is adjusted before anything is written; a bad map leaves no partial output
    map_target = None
    adjusted = None
    if map_path is not None:
        map_target = map_output or (target.with_name(target.name + ".map") if output else map_path)
        try:
            raw = json.loads(map_path.read_text(encoding="utf-8"))
            adjusted = adjust_raw_source_map(raw, code, result.edits)
        except (json.JSONDecodeError, SourceMapError) as e:
            console.print(f"[bold red]Source map adjustment failed for {map_path}: {e}[/bold red]")
            raise typer.Exit(1)

    target.write_text(result.code, encoding="utf-8")
    if map_target is not None:
        map_target.write_text(json.dumps(adjusted), encoding="utf-8")
    logger.info(f"[CLI] {description}")

    if telemetry_dir is not None:
        TelemetryCollector(telemetry_dir).record_conversion(str(input_path), result)

    _print_result(input_path, target, map_target, result)


@app.command(name="transforms")
def cmd_transforms():
    """List registered transforms."""
    table = Table(title="Registered Transforms", show_header=True)
    table.add_column("Transform", style="cyan")
    for transform_type in list_transforms():
        table.add_row(transform_type.value)
    console.print(table)


# ── Result Printers ───────────────────────────────────────────────────────────

def _print_result(input_path: Path, target: Path, map_target: Optional[Path], result: ConversionResult):
    if result.edit_count == 0:
        console.print(Panel(
            f"No private members rewritten in [cyan]{input_path}[/cyan]",
            title="CONVERT",
            border_style="yellow",
        ))
        return

    table = Table(title="Private-to-Property Result")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Input", str(input_path))
    table.add_row("Output", str(target))
    table.add_row("Source Map", str(map_target) if map_target else "-")
    table.add_row("Classes", str(result.class_count))
    table.add_row("Fields", str(result.field_count))
    table.add_row("Edits", str(result.edit_count))
    table.add_row("Elapsed", f"{result.elapsed_ms:.1f}ms")
    console.print(table)


if __name__ == "__main__":
    app()
