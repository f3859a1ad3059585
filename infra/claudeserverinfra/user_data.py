"""Cloud-init commands that turn a stock Ubuntu instance into a Claude Server.

The instance installs code-server behind Caddy, which obtains a Let's Encrypt
certificate for the configured domain. The code-server password is read from
SSM Parameter Store at boot so it never appears in the CloudFormation
template.
"""

from claudeserver.schema import ClaudeServerConfig

DEV_USER = "ubuntu"
CODE_SERVER_PORT = 8080
NODE_MAJOR = 22


def bootstrap_commands(config: ClaudeServerConfig) -> list[str]:
    """Return the shell commands run once on first boot."""
    home = f"/home/{DEV_USER}"
    return [
        "set -euo pipefail",
        # cloud-init may run without HOME; the code-server installer caches under it
        "export HOME=/root",
        "export DEBIAN_FRONTEND=noninteractive",
        "apt-get update -y",
        "apt-get install -y curl git unzip debian-keyring debian-archive-keyring apt-transport-https",
        "snap install aws-cli --classic",
        # Node.js, needed by Claude Code
        f"curl -fsSL https://deb.nodesource.com/setup_{NODE_MAJOR}.x | bash -",
        "apt-get install -y nodejs",
        "npm install -g @anthropic-ai/claude-code",
        # Caddy
        "curl -1sLf 'https://dl.cloudsmith.io/public/caddy/stable/gpg.key'"
        " | gpg --dearmor -o /usr/share/keyrings/caddy-stable-archive-keyring.gpg",
        "curl -1sLf 'https://dl.cloudsmith.io/public/caddy/stable/debian.deb.txt'"
        " > /etc/apt/sources.list.d/caddy-stable.list",
        "apt-get update -y",
        "apt-get install -y caddy",
        # code-server
        "curl -fsSL https://code-server.dev/install.sh | sh",
        (
            "CODE_SERVER_PASSWORD=$(aws ssm get-parameter"
            f" --name '{config.ssm_password_parameter_name}'"
            " --with-decryption --query Parameter.Value --output text"
            f" --region {config.region})"
        ),
        *code_server_config_commands(home),
        f"chown -R {DEV_USER}:{DEV_USER} {home}/.config",
        f"systemctl enable --now code-server@{DEV_USER}",
        # Caddy terminates TLS and proxies to code-server
        "cat > /etc/caddy/Caddyfile << 'EOF'",
        "{",
        f"    email {config.email}",
        "}",
        "",
        f"{config.domain} {{",
        f"    reverse_proxy 127.0.0.1:{CODE_SERVER_PORT}",
        "}",
        "EOF",
        "systemctl enable caddy",
        "systemctl restart caddy",
    ]


def code_server_config_commands(home: str) -> list[str]:
    """Write code-server's config.yaml from $CODE_SERVER_PASSWORD.

    The password is written as a YAML single-quoted scalar, where the only
    escape is doubling the quote character.
    """
    return [
        "CODE_SERVER_PASSWORD_YAML=${CODE_SERVER_PASSWORD//\\'/\\'\\'}",
        f"mkdir -p {home}/.config/code-server",
        f"cat > {home}/.config/code-server/config.yaml << EOF",
        f"bind-addr: 127.0.0.1:{CODE_SERVER_PORT}",
        "auth: password",
        "password: '${CODE_SERVER_PASSWORD_YAML}'",
        "cert: false",
        "EOF",
    ]
