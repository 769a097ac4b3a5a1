from __future__ import annotations

import io
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from botocore.exceptions import BotoCoreError, ClientError

from lambctl.aws.invoke import InvokeOptions, PayloadDecodeError, invoke as invoke_function, iter_payloads
from lambctl.aws.session import get_function_policy, lambda_client, make_session
from lambctl.config import FunctionConfigError, find_function_filename, load_function
from lambctl.jsonutil import marshal_json, save_file
from lambctl.policy.function_url import function_url_permissions
from lambctl.policy.statement import StatementDecodeError

app = typer.Typer(add_completion=False)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _fail(msg: str):
    typer.echo(msg, err=True)
    raise typer.Exit(1)


def _load(function: Optional[Path]):
    path = function or Path(find_function_filename())
    try:
        return load_function(path)
    except FunctionConfigError as e:
        _fail(str(e))


@app.callback()
def main(
    log_level: str = typer.Option("info", envvar="LAMBCTL_LOG_LEVEL", help="Log level (debug, info, warning, error)"),
):
    logging.basicConfig(level=log_level.upper(), format=LOG_FORMAT)


@app.command()
def invoke(
    function: Optional[Path] = typer.Option(None, envvar="LAMBCTL_FUNCTION", help="Function definition file"),
    payload: Optional[str] = typer.Option(None, help="Payload to invoke. If not specified, read from STDIN"),
    async_: bool = typer.Option(False, "--async", help="Invocation type async"),
    log_tail: bool = typer.Option(False, "--log-tail", help="Output tail of log to STDERR"),
    qualifier: Optional[str] = typer.Option(None, help="Version or alias to invoke"),
    profile: Optional[str] = typer.Option(None, envvar="AWS_PROFILE", help="AWS profile name"),
    region: Optional[str] = typer.Option(None, envvar="AWS_REGION", help="AWS region"),
):
    fn = _load(function)

    if payload is not None:
        src = io.StringIO(payload)
    else:
        if sys.stdin.isatty():
            typer.echo("Enter JSON payloads for the invoking function into STDIN. (Type Ctrl-D to close.)")
        src = sys.stdin

    client = lambda_client(make_session(profile=profile, region=region))
    opts = InvokeOptions(async_=async_, log_tail=log_tail, qualifier=qualifier)
    try:
        invoke_function(client, fn.FunctionName, iter_payloads(src), opts, sys.stdout, sys.stderr)
    except PayloadDecodeError as e:
        _fail(str(e))


@app.command("url-permissions")
def url_permissions(
    function: Optional[Path] = typer.Option(None, envvar="LAMBCTL_FUNCTION", help="Function definition file"),
    qualifier: Optional[str] = typer.Option(None, help="Function URL alias"),
    output: Optional[Path] = typer.Option(None, help="Write permissions to this file instead of STDOUT"),
    profile: Optional[str] = typer.Option(None, envvar="AWS_PROFILE", help="AWS profile name"),
    region: Optional[str] = typer.Option(None, envvar="AWS_REGION", help="AWS region"),
):
    fn = _load(function)
    client = lambda_client(make_session(profile=profile, region=region))

    try:
        policy = get_function_policy(client, fn.FunctionName, qualifier=qualifier)
    except (ClientError, BotoCoreError) as e:
        _fail(f"failed to get policy of {fn.FunctionName}: {e}")
    perms = []
    if policy is not None:
        try:
            perms = function_url_permissions(policy)
        except StatementDecodeError as e:
            _fail(f"failed to parse policy of {fn.FunctionName}: {e}")

    out = marshal_json([p.as_dict() for p in perms])
    if output is None:
        typer.echo(out, nl=False)
        return
    save_file(output, out)


if __name__ == "__main__":
    app()
