import shutil

import boto3
from botocore.exceptions import BotoCoreError, ClientError


def has_aws_creds():
    try:
        boto3.client("sts").get_caller_identity()
        return True
    except (BotoCoreError, ClientError):
        return False


def has_node():
    # aws-cdk-lib runs its constructs in a node subprocess via jsii
    return shutil.which("node") is not None


def env_vars_all() -> dict[str, str]:
    return {
        "CLAUDE_SERVER_DOMAIN": "dev.example.com",
        "CLAUDE_SERVER_HOSTED_ZONE_ID": "Z0123456789ABCDEFGHIJ",
        "CLAUDE_SERVER_CODE_SERVER_PASSWORD": "correct-horse-battery-staple",
        "CLAUDE_SERVER_EMAIL": "dev@example.com",
        "CLAUDE_SERVER_KEY_PAIR_NAME": "dev-key",
        "CLAUDE_SERVER_INSTANCE_TYPE": "t4g.micro",
        "CLAUDE_SERVER_VOLUME_SIZE": "40",
        "CLAUDE_SERVER_REGION": "eu-west-2",
        "CLAUDE_SERVER_SSM_PASSWORD_PARAMETER_NAME": "/dev/code-server-password",
    }


def stubbed_client(service: str, region: str = "us-east-1"):
    return boto3.client(
        service,
        region_name=region,
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )
