from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional

import typer

from csvbind.builder.loader import load_description
from csvbind.builder.schema import SchemaCompiler
from csvbind.builder.types import BuildCase
from csvbind.config import BindConfig, load_config
from csvbind.csvio.reader import BeanReader
from csvbind.errors import CsvBindError
from csvbind.schemas.models import RecordReport

app = typer.Typer(help="csvbind CLI")


def _config(path: Optional[Path]) -> BindConfig:
    return load_config(path) if path else BindConfig()


@app.command()
def validate(
    description: Path = typer.Argument(..., help="Bean description YAML"),
    csv_path: Path = typer.Argument(..., help="CSV file to validate"),
    group: List[str] = typer.Option(None, "--group", "-g", help="Active group (repeatable)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="csvbind config YAML"),
    header: Optional[bool] = typer.Option(None, "--header/--no-header", help="Skip the first record (default: from description)"),
    out: Optional[Path] = typer.Option(None, "--out", "-o", help="Write a JSONL report here"),
):
    """Read CSV_PATH with the described bean and report violations. Exit code 1 when any record fails."""
    try:
        cfg = _config(config)
        doc = load_description(description)
        schema = SchemaCompiler.from_config(cfg).compile(doc.description, BuildCase.READ, group)
        reader = BeanReader(schema)
        results = list(reader.read_csv(
            csv_path,
            header=doc.header if header is None else header,
            delimiter=doc.delimiter,
            on_error="collect",
        ))
    except (CsvBindError, FileNotFoundError) as e:
        typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    reports = [RecordReport.from_result(doc.description.name, r) for r in results]
    if out:
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8") as f:
            for rep in reports:
                f.write(rep.model_dump_json() + "\n")

    failed = [r for r in results if not r.ok]
    for r in failed:
        for msg in r.messages():
            typer.echo(msg)
    colour = typer.colors.RED if failed else typer.colors.GREEN
    typer.secho(f"{len(results)} record(s), {len(failed)} with problems", fg=colour)
    if failed:
        raise typer.Exit(code=1)


@app.command()
def describe(
    description: Path = typer.Argument(..., help="Bean description YAML"),
    case: str = typer.Option("read", "--case", help="read | write"),
    group: List[str] = typer.Option(None, "--group", "-g", help="Active group (repeatable)"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="csvbind config YAML"),
):
    """Print the compiled processor chain of every column as JSON."""
    try:
        cfg = _config(config)
        doc = load_description(description)
        schema = SchemaCompiler.from_config(cfg).compile(doc.description, BuildCase.parse(case), group)
    except (CsvBindError, FileNotFoundError, ValueError) as e:
        typer.secho(f"ERROR: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    typer.echo(json.dumps(schema.summary(), indent=2))


if __name__ == "__main__":
    app()
