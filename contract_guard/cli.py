#!/usr/bin/env python3
"""
CLI for contract resolution

Commands:
    resolve        - Find the contract path a request matches
    validate-body  - Resolve a request and validate a JSON body file
    paths          - List contract templates and methods in match order

Usage:
    contract-guard -c openapi.yaml resolve GET /pets/42
    contract-guard -c openapi.yaml validate-body POST /pets body.json
    contract-guard -c openapi.yaml paths

Examples:
    # Machine-readable result
    contract-guard -c openapi.yaml resolve GET /pets/abc --json

    # Explain why a parameterised path was rejected
    contract-guard -c openapi.yaml resolve GET /pets/abc --report-param-types
"""

import json
import sys

import click

from contract_guard import __version__
from contract_guard.config import Config, configure_logging
from contract_guard.contracts.loader import load_contract
from contract_guard.contracts.paths import find_path
from contract_guard.contracts.validate import ContractLoadError
from contract_guard.contracts.wrapper import validate_request
from contract_guard.constants import HTTP_METHODS


def _load(contract_path):
    try:
        return load_contract(contract_path)
    except ContractLoadError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(2)


def _echo_errors(errors):
    for error in errors:
        click.secho(f"  {error}", fg="red")
        if error.how_to_fix:
            click.echo(f"    fix: {error.how_to_fix}")
        for failure in error.schema_validation_errors:
            click.echo(f"    - {failure.location} (line {failure.line}, col {failure.column}): {failure.reason}")


@click.group()
@click.version_option(version=__version__, prog_name="contract-guard")
@click.option(
    "--contract", "-c", "contract_path",
    default=Config.CONTRACT_DOCUMENT, show_default=True,
    type=click.Path(dir_okay=False),
    help="OpenAPI document (YAML or JSON)",
)
@click.option("--log-level", default=None, help="Logging level (default: LOG_LEVEL)")
@click.pass_context
def cli(ctx, contract_path, log_level):
    """contract-guard - resolve requests against an OpenAPI contract."""
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["contract_path"] = contract_path


@cli.command("resolve")
@click.argument("method", type=click.Choice(HTTP_METHODS, case_sensitive=False))
@click.argument("path")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.option("--report-param-types", is_flag=True, help="Include path parameter type errors")
@click.pass_context
def resolve(ctx, method, path, output_json, report_param_types):
    """
    Find the contract path a request matches.

    METHOD: HTTP method (GET, POST, ...)
    PATH: Request path, a query string is ignored
    """
    contract = _load(ctx.obj["contract_path"])
    method = method.upper()
    request_path = path.split("?", 1)[0] or "/"

    path_item, errors, template = find_path(
        method, request_path, contract,
        report_parameter_types=report_param_types or None,
    )

    if output_json:
        click.echo(json.dumps({
            "method": method,
            "path": request_path,
            "matched": path_item is not None,
            "template": template,
            "errors": [e.to_dict() for e in errors],
        }, indent=2, default=str))
    elif path_item is not None:
        click.secho(f"MATCH {method} {request_path} -> {template}", fg="green")
    else:
        click.secho(f"NO MATCH {method} {request_path}", fg="red")
        _echo_errors(errors)

    sys.exit(0 if path_item is not None else 1)


@cli.command("validate-body")
@click.argument("method", type=click.Choice(HTTP_METHODS, case_sensitive=False))
@click.argument("path")
@click.argument("body_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--content-type", default="application/json", show_default=True)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
@click.pass_context
def validate_body(ctx, method, path, body_file, content_type, output_json):
    """
    Resolve a request and validate a body file against its request schema.

    METHOD: HTTP method (POST, PUT, PATCH)
    PATH: Request path
    BODY_FILE: File holding the request body
    """
    contract = _load(ctx.obj["contract_path"])
    method = method.upper()
    request_path = path.split("?", 1)[0] or "/"
    with open(body_file, "rb") as f:
        body = f.read()

    match = validate_request(contract, method, request_path, body, content_type)

    if output_json:
        click.echo(json.dumps({
            "method": method,
            "path": request_path,
            "template": match.template,
            "valid": not match.errors,
            "errors": [e.to_dict() for e in match.errors],
        }, indent=2, default=str))
    elif not match.errors:
        click.secho(f"VALID {method} {request_path} -> {match.template}", fg="green")
    else:
        click.secho(f"INVALID {method} {request_path}", fg="red")
        _echo_errors(match.errors)

    sys.exit(0 if not match.errors else 1)


@cli.command("paths")
@click.pass_context
def paths(ctx):
    """List contract templates and their methods, in match order."""
    contract = _load(ctx.obj["contract_path"])
    click.echo(f"{contract.name} {contract.version}".strip())
    for item in contract.paths:
        click.echo(f"  {item.template}  [{', '.join(item.methods)}]")


if __name__ == "__main__":
    cli()
