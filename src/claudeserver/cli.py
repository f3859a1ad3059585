"""Operator commands for a Claude Server deployment."""

import logging
from typing import Optional

import boto3
import typer
from rich import box, print
from rich.logging import RichHandler
from rich.table import Table
from tenacity import RetryError, retry, stop_after_attempt, wait_fixed

from claudeserver.preflight import (
    ensure_parameter_exists,
    parameter_exists,
    put_password_parameter,
)
from claudeserver.schema import ClaudeServerConfig

app = typer.Typer(no_args_is_help=True, help="Manage a Claude Server deployment.")

logger = logging.getLogger(__name__)


class InstanceNotReadyError(Exception):
    pass


@retry(stop=stop_after_attempt(20), wait=wait_fixed(30))
def _wait_for_ssm(instance_id, region):
    ssm = boto3.client("ssm", region_name=region)
    resp = ssm.describe_instance_information(
        InstanceInformationFilterList=[
            {"key": "InstanceIds", "valueSet": [instance_id]}
        ]
    )
    if (
        not resp["InstanceInformationList"]
        or resp["InstanceInformationList"][0]["PingStatus"] != "Online"
    ):
        raise InstanceNotReadyError(f"Instance {instance_id} is not online yet")
    return True


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging."),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


@app.command()
def check() -> None:
    """Verify the code-server password parameter exists in SSM."""
    config = ClaudeServerConfig.from_settings()
    ensure_parameter_exists(config.ssm_password_parameter_name, config.region)
    print(
        f"[green]Found[/green] {config.ssm_password_parameter_name}"
        f" in {config.region}"
    )


@app.command("put-password")
def put_password(
    overwrite: bool = typer.Option(
        False, "--overwrite", help="Replace an existing parameter value."
    ),
) -> None:
    """Store the configured code-server password as an SSM SecureString."""
    config = ClaudeServerConfig.from_settings()
    if not config.code_server_password:
        print(
            "[red]No password configured.[/red]"
            " Set CLAUDE_SERVER_CODE_SERVER_PASSWORD and try again."
        )
        raise typer.Exit(code=1)

    if not overwrite and parameter_exists(
        config.ssm_password_parameter_name, config.region
    ):
        print(
            f"[yellow]{config.ssm_password_parameter_name} already exists.[/yellow]"
            " Pass --overwrite to replace it."
        )
        raise typer.Exit(code=1)

    version = put_password_parameter(
        config.ssm_password_parameter_name,
        config.region,
        config.code_server_password,
        overwrite=overwrite,
    )
    print(
        f"[green]Stored[/green] {config.ssm_password_parameter_name}"
        f" (version {version})"
    )


@app.command("show-config")
def show_config() -> None:
    """Print the resolved configuration."""
    config = ClaudeServerConfig.from_settings()

    table = Table(
        box=box.SQUARE,
        show_lines=False,
        title="Claude Server configuration",
        title_style="bold",
        title_justify="left",
    )
    table.add_column("Setting")
    table.add_column("Value")
    for name, value in config.model_dump().items():
        if name == "code_server_password":
            value = "********" if value else "(not set)"
        elif name == "extra_tags":
            value = ";".join(f"{k}={v}" for k, v in value) or "(none)"
        table.add_row(name, str(value))
    print(table)


@app.command("wait-ready")
def wait_ready(
    instance_id: str = typer.Option(..., "--instance-id", help="EC2 instance ID."),
    region: Optional[str] = typer.Option(
        None, "--region", help="Defaults to the configured region."
    ),
) -> None:
    """Block until the instance is reachable through Session Manager."""
    if region is None:
        region = ClaudeServerConfig.from_settings().region
    logger.info(f"Waiting for {instance_id} to come online in SSM")
    try:
        _wait_for_ssm(instance_id, region)
    except RetryError:
        print(f"[red]{instance_id} did not come online in time.[/red]")
        raise typer.Exit(code=1)
    print(f"[green]{instance_id} is online.[/green]")


if __name__ == "__main__":
    app()
