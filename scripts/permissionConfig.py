"""
Configuration and Azure authentication for the managed identity permission tool.

Settings come from an optional YAML file and are then overridden by
command-line flags. The resulting ToolConfig is passed explicitly to the
permission manager.
"""

import os

import yaml
from azure.identity import (
    AzureCliCredential,
    ChainedTokenCredential,
    DefaultAzureCredential,
    EnvironmentCredential,
    InteractiveBrowserCredential,
)


GRAPH_ENDPOINT = "https://graph.microsoft.com/v1.0"
GRAPH_SCOPES = ["https://graph.microsoft.com/.default"]
DEFAULT_TIMEOUT = 30.0


class ToolConfig:
    """Settings shared by every operation of a single invocation."""

    def __init__(
        self,
        tenant_id: str = None,
        use_interactive: bool = False,
        graph_endpoint: str = GRAPH_ENDPOINT,
        scopes: list = None,
        timeout: float = DEFAULT_TIMEOUT,
        dry_run: bool = False,
    ):
        self.tenant_id = tenant_id
        self.use_interactive = use_interactive
        self.graph_endpoint = graph_endpoint.rstrip("/")
        self.scopes = list(scopes or GRAPH_SCOPES)
        self.timeout = timeout
        self.dry_run = dry_run

    def __repr__(self):
        return (
            f"ToolConfig(tenant_id={self.tenant_id!r}, use_interactive={self.use_interactive}, "
            f"graph_endpoint={self.graph_endpoint!r}, timeout={self.timeout}, dry_run={self.dry_run})"
        )


def load_config(config_file_path: str) -> dict:
    """Load configuration from a YAML file"""

    if not os.path.exists(config_file_path):
        raise FileNotFoundError(f"Configuration file not found: {config_file_path}")

    with open(config_file_path, "r") as f:
        config = yaml.safe_load(f)

    if config is None:
        config = {}

    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_file_path}")

    return config


def bool_setting(file_values: dict, key: str) -> bool:
    """Read a true/false setting; quoted strings such as "false" are rejected."""
    value = file_values.get(key, False)
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got: {value!r}")
    return value


def build_config(args=None, config_file_path: str = None) -> ToolConfig:
    """
    Build the ToolConfig for one run.

    Values from the YAML file are applied first; any flag set on the command
    line wins over the file.

    Args:
        args: Parsed argparse namespace (optional)
        config_file_path: Path to a YAML configuration file (optional)

    Returns:
        ToolConfig instance
    """
    file_values = load_config(config_file_path) if config_file_path else {}

    timeout = file_values.get("TIMEOUT", DEFAULT_TIMEOUT)
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        raise ValueError(f"TIMEOUT must be a number, got: {timeout!r}")
    if timeout <= 0:
        raise ValueError(f"TIMEOUT must be positive, got: {timeout}")

    config = ToolConfig(
        tenant_id=file_values.get("TENANT_ID"),
        use_interactive=bool_setting(file_values, "INTERACTIVE"),
        graph_endpoint=file_values.get("GRAPH_ENDPOINT") or GRAPH_ENDPOINT,
        timeout=timeout,
        dry_run=bool_setting(file_values, "DRY_RUN"),
    )

    if args is not None:
        if getattr(args, "tenant_id", None):
            config.tenant_id = args.tenant_id
        if getattr(args, "interactive", False):
            config.use_interactive = True
        if getattr(args, "dry_run", False):
            config.dry_run = True

    return config


def build_credential(config: ToolConfig):
    """
    Create the Azure credential used for Microsoft Graph.

    Interactive mode opens a browser login against the configured tenant.
    With a tenant configured, only credentials bound to that tenant are
    tried: service principal settings from the environment when
    AZURE_TENANT_ID names the same tenant, then the Azure CLI login scoped
    to it. Without a tenant, DefaultAzureCredential walks its usual chain.
    """
    if config.use_interactive:
        if config.tenant_id:
            return InteractiveBrowserCredential(tenant_id=config.tenant_id)
        return InteractiveBrowserCredential()

    if config.tenant_id:
        credentials = []
        if os.environ.get("AZURE_TENANT_ID") == config.tenant_id:
            credentials.append(EnvironmentCredential())
        credentials.append(AzureCliCredential(tenant_id=config.tenant_id))
        return ChainedTokenCredential(*credentials)

    return DefaultAzureCredential()
