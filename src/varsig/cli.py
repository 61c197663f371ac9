"""Command-line interface for varsig signatures."""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__
from .config import VarsigConfig, generate_default_config, load_config
from .envelope import create, generate_key, inspect_varsig, verify
from .errors import AlgorithmNotFoundError, KeyImportError, VarsigError
from .registry import AlgorithmRegistry, build_default_registry

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_INVALID_SIGNATURE = 2
EXIT_MALFORMED_INPUT = 3


def setup_logging(level: str = "WARNING") -> None:
    """Configure logging for the CLI."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _fail(message: str, code: int = EXIT_RUNTIME_ERROR) -> NoReturn:
    err_console.print(f"[bold red]✗[/bold red] {message}", highlight=False)
    sys.exit(code)


def _fail_decode(error: VarsigError) -> NoReturn:
    _fail(f"Malformed input: {error}", EXIT_MALFORMED_INPUT)


def _read_hex(value: str, what: str) -> bytes:
    """Decode hex given inline or stored in a text file."""
    try:
        text = Path(value).read_text().strip() if os.path.isfile(value) else value
    except OSError as e:
        _fail(f"Error reading {what}: {e}")

    text = "".join(text.split())
    try:
        return bytes.fromhex(text)
    except ValueError:
        _fail(f"Invalid hex format for {what}")


def _read_varsig(value: str) -> bytes:
    """Read a varsig from a raw binary file or a hex string."""
    if os.path.isfile(value):
        try:
            return Path(value).read_bytes()
        except OSError as e:
            _fail(f"Error reading signature: {e}")
    try:
        return bytes.fromhex("".join(value.split()))
    except ValueError:
        _fail(f"Varsig is neither a file nor valid hex: {value}")


def _resolve(registry: AlgorithmRegistry, algo: str):
    try:
        return registry.by_name(algo).implementation
    except AlgorithmNotFoundError as e:
        _fail(f"{e}. Choose one of: {', '.join(registry.names())}")


@click.group()
@click.version_option(version=__version__, prog_name="varsig-cli")
@click.option("--config", "-c", type=click.Path(exists=True), help="Configuration file path")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False), help="Log level")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def main(ctx: click.Context, config: Optional[str], log_level: Optional[str], verbose: bool) -> None:
    """Create, verify and inspect varsig signatures."""
    ctx.ensure_object(dict)

    if config:
        try:
            ctx.obj["config"] = load_config(Path(config))
        except (ValueError, yaml.YAMLError) as e:
            _fail(f"Invalid configuration: {e}")
    else:
        ctx.obj["config"] = VarsigConfig()

    cfg: VarsigConfig = ctx.obj["config"]
    setup_logging("DEBUG" if verbose else (log_level or cfg.log_level))

    ctx.obj["verbose"] = verbose
    ctx.obj["registry"] = build_default_registry(rsa_key_size=cfg.crypto.rsa_key_size)


@main.command("create")
@click.argument("payload")
@click.option("--algo", "-a", help="Signature algorithm (default from config: ed25519)")
@click.option("--key", "-k", required=True, help="Private key as hex string or path to a hex file")
@click.option("--out", "-o", type=click.Path(), help="Output file for raw varsig bytes (default: print hex)")
@click.pass_context
def create_cmd(ctx: click.Context, payload: str, algo: Optional[str], key: str, out: Optional[str]) -> None:
    """Create a varsig for PAYLOAD."""
    cfg: VarsigConfig = ctx.obj["config"]
    algo = algo or cfg.crypto.default_algorithm
    implementation = _resolve(ctx.obj["registry"], algo)

    try:
        private_key = implementation.import_private_key(_read_hex(key, "private key"))
    except KeyImportError as e:
        _fail(f"Invalid private key: {e.reason}")

    try:
        varsig = asyncio.run(create(payload.encode(), implementation, private_key))
    except (ValueError, TypeError) as e:
        _fail(f"Error creating signature: {e}")

    if out:
        Path(out).write_bytes(varsig)
        console.print(f"[bold green]✓[/bold green] varsig written to {out}")
    else:
        click.echo(cfg.format_hex(varsig))

    if ctx.obj["verbose"]:
        table = Table(title="Signature Details")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Algorithm", algo)
        table.add_row("Signature Header", f"0x{implementation.signature_header_tag():x}")
        table.add_row("Hash Algorithm", f"0x{implementation.hash_algorithm_tag():x}")
        table.add_row("Varsig Size", f"{len(varsig)} bytes")
        err_console.print(table)


@main.command("verify")
@click.argument("payload")
@click.option("--key", "-k", required=True, help="Public key as hex string or path to a hex file")
@click.option("--sig", "-s", required=True, help="Varsig file (raw bytes) or hex string")
@click.pass_context
def verify_cmd(ctx: click.Context, payload: str, key: str, sig: str) -> None:
    """Verify a varsig signature for PAYLOAD."""
    registry: AlgorithmRegistry = ctx.obj["registry"]
    varsig = _read_varsig(sig)
    key_bytes = _read_hex(key, "public key")

    try:
        info = inspect_varsig(varsig, registry)
    except VarsigError as e:
        _fail_decode(e)

    implementation = registry.by_name(info.algorithm).implementation
    try:
        public_key = implementation.import_public_key(key_bytes)
    except KeyImportError as e:
        _fail(f"Invalid public key: {e.reason}")

    try:
        valid = asyncio.run(verify(payload.encode(), varsig, public_key, registry))
    except (ValueError, TypeError) as e:
        _fail(f"Error verifying signature: {e}")

    if valid:
        console.print(f"[bold green]✓[/bold green] Signature is valid ({info.algorithm})")
        sys.exit(EXIT_SUCCESS)
    _fail("Invalid signature", EXIT_INVALID_SIGNATURE)


@main.command("inspect")
@click.argument("varsig")
@click.option("--json", "as_json", is_flag=True, help="Print components as JSON")
@click.pass_context
def inspect_cmd(ctx: click.Context, varsig: str, as_json: bool) -> None:
    """Display the components of a VARSIG (hex string or file)."""
    data = _read_varsig(varsig)

    try:
        info = inspect_varsig(data, ctx.obj["registry"])
    except VarsigError as e:
        _fail_decode(e)

    components = info.to_dict()
    if as_json:
        click.echo(json.dumps(components, indent=2))
        return

    click.echo("Varsig Components:")
    click.echo(f"  Varsig Prefix:         0x{components['prefix']}")
    click.echo(f"  Signature Header:      0x{components['signatureHeader']} ({info.algorithm})")
    click.echo(f"  Hash Algorithm:        0x{components['hashAlgorithm']}")
    click.echo(f"  Signature Byte Length: 0x{components['signatureByteLength']} ({info.signature_length} bytes)")
    click.echo(f"  Encoding Info:         0x{components['encodingInfo']}")
    click.echo(f"  Signature:             0x{components['signature']}")
    click.echo(f"  Total Length:          {components['totalLength']} bytes")
    if info.has_trailing_data:
        err_console.print(
            f"[bold yellow]⚠[/bold yellow] {info.total_length - info.envelope_length} "
            "trailing bytes after the signature were ignored"
        )


@main.command("generate-key")
@click.option("--algo", "-a", help="Signature algorithm (default from config: ed25519)")
@click.option("--private", "private_path", type=click.Path(), help="Output private key file path")
@click.option("--public", "public_path", type=click.Path(), help="Output public key file path")
@click.pass_context
def generate_key_cmd(
    ctx: click.Context,
    algo: Optional[str],
    private_path: Optional[str],
    public_path: Optional[str],
) -> None:
    """Generate a private/public key pair."""
    cfg: VarsigConfig = ctx.obj["config"]
    algo = algo or cfg.crypto.default_algorithm
    implementation = _resolve(ctx.obj["registry"], algo)

    try:
        key_pair = asyncio.run(generate_key(implementation))
    except (ValueError, TypeError) as e:
        _fail(f"Error generating key: {e}")

    private_hex = cfg.format_hex(implementation.export_private_key(key_pair.private_key))
    public_hex = cfg.format_hex(implementation.export_public_key(key_pair.public_key))

    if private_path:
        path = Path(private_path)
        path.write_text(private_hex)
        path.chmod(0o600)
        console.print(f"[bold green]✓[/bold green] Private key saved to {private_path}")
    else:
        click.echo(f"Private key (hex): {private_hex}")

    if public_path:
        Path(public_path).write_text(public_hex)
        console.print(f"[bold green]✓[/bold green] Public key saved to {public_path}")
    else:
        click.echo(f"Public key (hex): {public_hex}")


@main.command("init-config")
@click.option("--output", "-o", type=click.Path(), required=True, help="Output configuration file")
@click.option("--format", "fmt", type=click.Choice(["yaml", "json"]), default="yaml", help="File format")
def init_config(output: str, fmt: str) -> None:
    """Generate a default configuration file."""
    Path(output).write_text(generate_default_config(fmt))
    console.print(f"[bold green]✓[/bold green] Configuration saved to {output}")


if __name__ == "__main__":
    main()
