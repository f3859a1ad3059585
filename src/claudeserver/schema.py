"""
Schema definitions for the Claude Server deployment.

This module provides the configuration class read by the CDK app and the
operator CLI before anything is deployed.
"""

from pathlib import Path
from typing import Optional, Tuple, Union

from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

from ._unpack_tags import unpack_tags

env_prefix = "CLAUDE_SERVER_"

DEFAULT_REGION = "us-east-1"
DEFAULT_INSTANCE_TYPE = "t4g.small"
DEFAULT_VOLUME_SIZE = 30
DEFAULT_SSM_PASSWORD_PARAMETER_NAME = "/claude-server/code-server-password"

# Ubuntu 24.04 images ship an 8 GiB root snapshot
MIN_VOLUME_SIZE = 8

_REQUIRED = ("domain", "hosted_zone_id", "email", "key_pair_name")


class _ClaudeServerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", extra="ignore", env_prefix=env_prefix
    )
    domain: Optional[str] = None
    hosted_zone_id: Optional[str] = None
    code_server_password: Optional[str] = None
    email: Optional[str] = None
    key_pair_name: Optional[str] = None
    instance_type: Optional[str] = None
    volume_size: Optional[int] = None
    region: Optional[str] = None
    ssm_password_parameter_name: Optional[str] = None
    extra_tags_str: Optional[str] = None  # in the format "key1=value1;key2=value2"


class ClaudeServerConfig(BaseModel, frozen=True):
    """
    Configuration for a Claude Server deployment.

    Attributes:
        domain: Fully qualified name code-server is served on,
            e.g. dev.example.com
        hosted_zone_id: Route 53 hosted zone ID of the parent domain
        code_server_password: Password for the code-server web UI (optional).
            Only used by ``claude-server put-password``; the instance reads
            the password from SSM at boot.
        email: Contact address for Let's Encrypt certificate notifications
        key_pair_name: Name of an existing EC2 key pair for SSH access
        instance_type: EC2 instance type (optional, defaults to t4g.small)
        volume_size: Root EBS volume size in GiB (optional, defaults to 30)
        region: AWS region (optional, defaults to us-east-1)
        ssm_password_parameter_name: SecureString parameter holding the
            code-server password
        extra_tags: tuple of 2-tuples of additional stack tags
    """

    domain: str
    hosted_zone_id: str
    code_server_password: Optional[str] = None
    email: str
    key_pair_name: str
    instance_type: str
    volume_size: int
    region: str
    ssm_password_parameter_name: str
    extra_tags: Tuple[Tuple[str, str], ...] = ()

    @classmethod
    def from_settings(cls, env_file: Union[str, Path, None] = None, **kwargs):
        """Create an instance from environment settings with optional overrides.

        Args:
            env_file: dotenv file to read instead of .env in the working directory.
            **kwargs: Values that take precedence over the environment.
        """
        if env_file is None:
            settings = _ClaudeServerSettings()
        else:
            settings = _ClaudeServerSettings(_env_file=env_file)

        params = {
            "domain": settings.domain,
            "hosted_zone_id": settings.hosted_zone_id,
            "code_server_password": settings.code_server_password,
            "email": settings.email,
            "key_pair_name": settings.key_pair_name,
            "instance_type": settings.instance_type,
            "volume_size": settings.volume_size,
            "region": settings.region,
            "ssm_password_parameter_name": settings.ssm_password_parameter_name,
            "extra_tags": unpack_tags(settings.extra_tags_str),
        }

        # Override with any provided kwargs
        params.update(kwargs)

        missing = [name for name in _REQUIRED if not params[name]]
        if missing:
            env_names = ", ".join(f"{env_prefix}{name.upper()}" for name in missing)
            raise ValueError(
                f"Missing required configuration: {', '.join(missing)}."
                f" Set {env_names} in the environment or in .env."
            )

        if params["instance_type"] is None:
            params["instance_type"] = DEFAULT_INSTANCE_TYPE

        if params["volume_size"] is None:
            params["volume_size"] = DEFAULT_VOLUME_SIZE

        if params["region"] is None:
            params["region"] = DEFAULT_REGION

        if params["ssm_password_parameter_name"] is None:
            params["ssm_password_parameter_name"] = DEFAULT_SSM_PASSWORD_PARAMETER_NAME

        if params["volume_size"] < MIN_VOLUME_SIZE:
            raise ValueError(
                f"Volume size {params['volume_size']} GiB is below the"
                f" {MIN_VOLUME_SIZE} GiB minimum for the root volume"
            )

        return cls(**params)

    @property
    def zone_name(self) -> str:
        """Name of the hosted zone, i.e. the domain without its first label."""
        return self.domain.split(".", 1)[1] if "." in self.domain else self.domain

    @property
    def url(self) -> str:
        return f"https://{self.domain}"
