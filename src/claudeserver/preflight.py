"""Checks run against AWS before the stack is synthesized."""

import sys
from logging import getLogger

import boto3
from botocore.exceptions import ClientError
from rich import print

logger = getLogger(__name__)

PARAMETER_NOT_FOUND = "ParameterNotFound"


def _is_parameter_not_found(e: ClientError) -> bool:
    return (
        e.response is not None
        and e.response.get("Error", {}).get("Code", None) == PARAMETER_NOT_FOUND
    )


def parameter_exists(parameter_name: str, region: str) -> bool:
    """Return whether the SSM parameter exists. Other errors propagate."""
    ssm_client = boto3.client("ssm", region_name=region)
    try:
        ssm_client.get_parameter(Name=parameter_name, WithDecryption=False)
    except ClientError as e:
        if _is_parameter_not_found(e):
            return False
        raise
    return True


def remediation_text(parameter_name: str, region: str) -> str:
    return (
        f"\n[red]SSM parameter [bold]{parameter_name}[/bold] not found"
        f" in region [bold]{region}[/bold].[/red]\n\n"
        "The code-server password must be stored before deploying. Create it with:\n\n"
        f"  aws ssm put-parameter --name {parameter_name} \\\n"
        "    --type SecureString --value 'your-strong-password' \\\n"
        f"    --region {region}\n\n"
        "or set CLAUDE_SERVER_CODE_SERVER_PASSWORD and run:\n\n"
        "  claude-server put-password\n"
    )


def ensure_parameter_exists(parameter_name: str, region: str) -> None:
    """Exit with status 1 and instructions if the SSM parameter is missing."""
    if not parameter_exists(parameter_name, region):
        print(remediation_text(parameter_name, region))
        sys.exit(1)
    logger.debug(f"Found SSM parameter {parameter_name} in {region}")


def put_password_parameter(
    parameter_name: str, region: str, password: str, overwrite: bool = False
) -> int:
    """Store the code-server password as a SecureString, returning its version."""
    ssm_client = boto3.client("ssm", region_name=region)
    response = ssm_client.put_parameter(
        Name=parameter_name,
        Description="code-server password for Claude Server",
        Value=password,
        Type="SecureString",
        Overwrite=overwrite,
    )
    logger.info(f"Stored SSM parameter {parameter_name} (version {response['Version']})")
    return response["Version"]
