"""CDK application entry point for the Claude Server infrastructure.

This module loads the deployment configuration, checks that the code-server
password has been stored in SSM, and synthesizes the Claude Server stack.
"""
import os
from pathlib import Path

import aws_cdk as cdk
from claudeserver.preflight import ensure_parameter_exists
from claudeserver.schema import ClaudeServerConfig
from claudeserver._unpack_tags import tags_as_dict
from claudeserverinfra.claudeserver_stack import ClaudeServerStack

# cdk.json runs this script from infra/, the .env lives at the repo root
ENV_FILE = Path(__file__).resolve().parent.parent / ".env"


def main() -> None:
    config = ClaudeServerConfig.from_settings(env_file=ENV_FILE)

    # Exits with status 1 and instructions if the parameter is missing
    ensure_parameter_exists(config.ssm_password_parameter_name, config.region)

    app = cdk.App()

    ClaudeServerStack(
        app,
        "ClaudeServerStack",
        config=config,
        env=cdk.Environment(
            account=os.getenv("CDK_DEFAULT_ACCOUNT"),
            region=config.region,
        ),
        description="Remote development environment with code-server and Claude Code",
        tags={
            "Project": "claude-server",
            **tags_as_dict(config.extra_tags),
        },
    )

    app.synth()


if __name__ == "__main__":
    main()
