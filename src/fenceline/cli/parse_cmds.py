"""Parsing commands: parse, extract, placeholders, types."""

from __future__ import annotations

from pathlib import Path
from typing import TextIO

import click

from fenceline.cli.helpers import (
    build_registry,
    load_parser_config,
    output_error,
    output_result,
    slugify,
)
from fenceline.cli.main import cli
from fenceline.core.parser import ArtifactParser, ParseResult
from fenceline.core.placeholders import replace_with_placeholders


def _chunks(text: str, size: int):
    for i in range(0, len(text), size):
        yield text[i : i + size]


def _run_parser(text: str, config: dict, chunk_size: int) -> tuple[ParseResult, list[dict]]:
    parser = ArtifactParser(config)
    if chunk_size > 0:
        for chunk in _chunks(text, chunk_size):
            parser.append(chunk)
    else:
        parser.append(text)
    result = parser.finalize()
    return result, parser.diagnostics


def _format_artifact_line(artifact: dict) -> str:
    pos = artifact["position"]
    return (
        f"  {artifact['id']}  {artifact['type']:<16} {artifact['status']:<10} "
        f"{artifact['title']}  [{pos['start']}-{pos['end']}]"
    )


# ---------------------------------------------------------------------------
# fenceline parse
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--chunk-size",
    type=click.IntRange(min=0),
    default=0,
    help="Feed the input in chunks of N characters (0 = all at once).",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def parse(source: TextIO, chunk_size: int, config_path: str | None, output_json: bool) -> None:
    """Parse a transcript and list the artifacts it contains."""
    config = load_parser_config(config_path, output_json)
    result, diagnostics = _run_parser(source.read(), config, chunk_size)

    lines = [f"Parsed {len(result['artifacts'])} artifact(s)."]
    lines.extend(_format_artifact_line(a) for a in result["artifacts"])
    for diag in diagnostics:
        lines.append(f"  warning: {diag['code']}: {diag['message']}")

    output_result(
        data={
            "artifacts": result["artifacts"],
            "plain_text": result["plain_text"],
            "is_complete": result["is_complete"],
            "diagnostics": diagnostics,
        },
        human_message="\n".join(lines),
        is_json=output_json,
    )


# ---------------------------------------------------------------------------
# fenceline extract
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option(
    "--out",
    "out_dir",
    type=click.Path(file_okay=False),
    required=True,
    help="Directory to write artifact files into (created if missing).",
)
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def extract(source: TextIO, out_dir: str, config_path: str | None, output_json: bool) -> None:
    """Write each artifact's content to its own file."""
    config = load_parser_config(config_path, output_json)
    result, _ = _run_parser(source.read(), config, 0)
    registry = build_registry()

    target = Path(out_dir)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        output_error(f"Cannot create output directory: {e}", "IO_ERROR", output_json)

    written: list[dict] = []
    for n, artifact in enumerate(result["artifacts"], start=1):
        filename = artifact["meta"].get("filename")
        if filename:
            # Never let a fence attribute escape the output directory.
            name = f"{n:02d}-{Path(str(filename)).name}"
        else:
            ext = registry.get_file_extension(artifact["type"])
            name = f"{n:02d}-{slugify(artifact['title'])}.{ext}"
        path = target / name
        try:
            path.write_text(artifact["content"] + "\n")
        except OSError as e:
            output_error(f"Cannot write {path}: {e}", "IO_ERROR", output_json)
        written.append(
            {
                "id": artifact["id"],
                "type": artifact["type"],
                "status": artifact["status"],
                "path": str(path),
            }
        )

    lines = [f"Wrote {len(written)} artifact file(s) to {target}."]
    lines.extend(f"  {w['path']}" for w in written)
    output_result(data=written, human_message="\n".join(lines), is_json=output_json)


# ---------------------------------------------------------------------------
# fenceline placeholders
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("source", type=click.File("r"), default="-")
@click.option("--streaming", is_flag=True, help="Mark an unclosed trailing fence as pending.")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def placeholders(
    source: TextIO, streaming: bool, config_path: str | None, output_json: bool
) -> None:
    """Print the message with every artifact replaced by a placeholder."""
    config = load_parser_config(config_path, output_json)
    result = replace_with_placeholders(source.read(), is_streaming=streaming, config=config)
    output_result(data=result, human_message=result["processed_text"], is_json=output_json)


# ---------------------------------------------------------------------------
# fenceline types
# ---------------------------------------------------------------------------


@cli.command("types")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def types_cmd(output_json: bool) -> None:
    """List registered artifact types and their renderers."""
    registry = build_registry()
    rows = [
        {
            "type": entry["type"],
            "display_name": entry.get("display_name", entry["type"]),
            "icon": entry.get("icon"),
            "can_edit": bool(entry.get("can_edit", False)),
            "canvas": registry.is_canvas_type(entry["type"]),
            "file_extension": registry.get_file_extension(entry["type"]),
        }
        for entry in registry.get_all()
    ]
    lines = [
        f"  {r['type']:<16} {r['display_name']:<18} .{r['file_extension']:<5}"
        + (" canvas" if r["canvas"] else "")
        for r in rows
    ]
    output_result(data=rows, human_message="\n".join(lines), is_json=output_json)
