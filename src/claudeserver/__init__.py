"""Configuration and pre-flight checks for the Claude Server CDK app."""

from claudeserver.preflight import ensure_parameter_exists
from claudeserver.schema import ClaudeServerConfig

__all__ = ["ClaudeServerConfig", "ensure_parameter_exists"]
