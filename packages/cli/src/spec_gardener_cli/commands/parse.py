"""parse command: show how an agent reply would be interpreted."""

from __future__ import annotations

import dataclasses
import json

import click
from rich.console import Console
from rich.table import Table

from spec_gardener_core.agents.parser import parse_cli_output

console = Console()


@click.command("parse")
@click.argument("source", type=click.File("r", encoding="utf-8"), default="-")
@click.option("--json", "as_json", is_flag=True, help="Print the parsed result as JSON.")
def parse_cmd(source, as_json: bool):
    """Parse a saved agent reply from SOURCE (a file, or stdin by default).

    Useful when tuning a custom prompt: shows whether the reply is read as a
    structured result or falls back to a question.
    """
    parsed = parse_cli_output(source.read())
    result = parsed.result
    fields = {"type": result.type, **dataclasses.asdict(result)}

    if as_json:
        click.echo(json.dumps({"result": fields, "parse_failed": parsed.parse_failed}, indent=2))
        return

    table = Table(title="Parsed agent reply", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for key, value in fields.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)

    if parsed.parse_failed:
        console.print("[yellow]Fallback: the reply is not a recognised result and would be posted as a question.[/yellow]")
    else:
        console.print("[green]Structured result recognised.[/green]")
