"""Command line interface for sealing and opening envelopes."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from mutualjose import EnvelopeOrchestrator, MutualJoseError, load_config
from mutualjose.keys import KeyMaterialSource
from mutualjose.utils.b64 import decode_header, split_segments

app = typer.Typer(help="CLI for mutual JWS/JWE envelopes")


@app.callback()
def main() -> None:
    """mutualjose CLI entry point."""
    pass


def _orchestrator(config_path: Optional[Path]) -> EnvelopeOrchestrator:
    try:
        config = load_config(str(config_path) if config_path else None)
    except ValidationError as e:
        typer.echo(f"Error: invalid configuration: {e}")
        raise typer.Exit(code=1)
    return EnvelopeOrchestrator.from_config(config)


@app.command("encrypt")
def encrypt(
    payload: str,
    config: Optional[Path] = typer.Option(None, help="Path to a mutualjose YAML config"),
) -> None:
    """
    Sign PAYLOAD with the client key and encrypt it for the server.

    Example:
        mutualjose encrypt '{"amount": 100}' --config mutualjose.yaml
    """
    try:
        data = json.loads(payload)
    except ValueError as e:
        typer.echo(f"Payload is not valid JSON: {e}")
        raise typer.Exit(code=1)

    orchestrator = _orchestrator(config)
    try:
        envelope = asyncio.run(orchestrator.encrypt(data))
    except MutualJoseError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    typer.echo(envelope)


@app.command("decrypt")
def decrypt(
    envelope: str,
    config: Optional[Path] = typer.Option(None, help="Path to a mutualjose YAML config"),
) -> None:
    """Decrypt ENVELOPE with the client key and verify the server signature."""
    orchestrator = _orchestrator(config)
    try:
        result = asyncio.run(orchestrator.decrypt(envelope.strip()))
    except MutualJoseError as e:
        typer.echo(f"Error: {e}")
        raise typer.Exit(code=1)
    typer.echo(json.dumps({"payload": result.payload, "header": result.header}, indent=2))


@app.command("probe")
def probe(url: str) -> None:
    """Check that a key set URL answers with HTTP 200."""
    reachable = asyncio.run(KeyMaterialSource().is_reachable(url))
    if not reachable:
        typer.echo(f"Unreachable: {url}")
        raise typer.Exit(code=1)
    typer.echo(f"Reachable: {url}")


@app.command("inspect")
def inspect(envelope: str) -> None:
    """Show the unverified header and segment sizes of a compact envelope."""
    envelope = envelope.strip()
    try:
        header = decode_header(envelope)
        segments = split_segments(envelope)
    except ValueError as e:
        typer.echo(f"Not a compact JOSE envelope: {e}")
        raise typer.Exit(code=1)

    kind = "JWE" if len(segments) == 5 else "JWS"
    typer.echo(f"Type: {kind}")
    typer.echo(f"Header: {json.dumps(header, sort_keys=True)}")
    typer.echo(f"Segment sizes: {[len(segment) for segment in segments]}")


if __name__ == "__main__":
    app()
