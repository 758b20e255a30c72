"""Host application registration.

Registers this server in Claude Desktop's ``claude_desktop_config.json`` so
the host can launch it. Only the ``gumroad`` entry under ``mcpServers`` is
written; every other key in the file is preserved.
"""

import json
import os
import shutil
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gumroad_mcp.config import PRODUCTION_BASE_URL
from gumroad_mcp.exceptions import InstallerError, format_validation_error

logger = structlog.get_logger()

SERVER_NAME = "gumroad"
CONFIG_FILE_NAME = "claude_desktop_config.json"
EXECUTABLE_NAME = "gumroad-mcp"

NOT_INSTALLED_MESSAGE = (
    "Claude Desktop was not found on this system. Install it first, or add "
    "the server manually if you are using a different MCP-compatible app."
)


class ServerEntry(BaseModel):
    """One entry of the host's ``mcpServers`` map."""

    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)


class DesktopConfig(BaseModel):
    """Claude Desktop configuration file.

    Permissive: unknown top-level keys are kept, other server entries are
    left untouched.
    """

    model_config = ConfigDict(extra="allow")

    mcpServers: dict[str, dict[str, Any]] = Field(default_factory=dict)

    @field_validator("mcpServers", mode="before")
    @classmethod
    def null_servers_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value


def get_config_folder_path(
    platform: str | None = None,
    environ: Mapping[str, str] | None = None,
    home: Path | None = None,
) -> Path:
    """Return Claude Desktop's configuration folder for the platform.

    Raises:
        InstallerError: If the platform is not supported by Claude Desktop.
    """
    platform = platform or sys.platform
    environ = os.environ if environ is None else environ
    home = home or Path.home()

    if platform == "win32":
        return Path(environ.get("APPDATA", "")) / "Claude"
    if platform == "darwin":
        return home / "Library" / "Application Support" / "Claude"
    raise InstallerError(
        f"Unsupported platform: {platform}",
        details={"platform": platform},
    )


def resolve_server_command() -> str:
    """Absolute path of the installed executable, or its bare name."""
    return shutil.which(EXECUTABLE_NAME) or EXECUTABLE_NAME


def build_server_entry(
    access_token: str,
    base_url: str = PRODUCTION_BASE_URL,
    command: str | None = None,
) -> ServerEntry:
    """Build the ``mcpServers`` entry launching this server."""
    return ServerEntry(
        command=command or resolve_server_command(),
        env={
            "GUMROAD_ACCESS_TOKEN": access_token,
            "GUMROAD_BASE_URL": base_url,
        },
    )


def load_config(config_path: Path) -> DesktopConfig:
    """Read and validate the host config file.

    Raises:
        InstallerError: If the file is unreadable, not valid JSON or fails validation.
    """
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InstallerError(
            f"Could not read {config_path}: {e}",
            details={"config_path": str(config_path)},
        ) from e
    except json.JSONDecodeError as e:
        raise InstallerError(
            f"{config_path} is not valid JSON: {e}",
            details={"config_path": str(config_path)},
        ) from e

    try:
        return DesktopConfig.model_validate(data)
    except ValidationError as e:
        raise InstallerError(
            format_validation_error(e, f"Invalid Claude Desktop config: {config_path}"),
            details={"config_path": str(config_path)},
        ) from e


def write_config(config_path: Path, data: dict[str, Any]) -> None:
    """Write the host config file with 2-space indentation.

    Raises:
        InstallerError: If the file cannot be written.
    """
    try:
        config_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as e:
        raise InstallerError(
            f"Could not write {config_path}: {e}",
            details={"config_path": str(config_path)},
        ) from e


def register_server(
    config_path: Path,
    entry: ServerEntry,
    server_name: str = SERVER_NAME,
) -> DesktopConfig:
    """Insert or overwrite one server entry in the host config file.

    Args:
        config_path: Path to ``claude_desktop_config.json``.
        entry: Server entry to write.
        server_name: Key under ``mcpServers``.

    Returns:
        The updated configuration as written to disk.

    Raises:
        InstallerError: If the config folder is missing, or the file is
            invalid or cannot be read or written.
    """
    if not config_path.parent.is_dir():
        raise InstallerError(
            NOT_INSTALLED_MESSAGE,
            details={"config_folder": str(config_path.parent)},
        )

    if not config_path.exists():
        write_config(config_path, {})

    config = load_config(config_path)
    config.mcpServers[server_name] = entry.model_dump()

    write_config(config_path, config.model_dump())
    logger.info(
        "Registered MCP server",
        server_name=server_name,
        config_path=str(config_path),
    )
    return config


def run_init(
    access_token: str | None,
    base_url: str | None = None,
    config_path: Path | None = None,
) -> int:
    """Register this server with Claude Desktop.

    Returns:
        Process exit status.
    """
    print("Setting up Gumroad MCP in Claude Desktop")

    try:
        if not access_token:
            raise InstallerError(
                "A Gumroad API access token is required "
                "(--access-token or GUMROAD_ACCESS_TOKEN)."
            )

        if config_path is None:
            config_path = get_config_folder_path() / CONFIG_FILE_NAME

        entry = build_server_entry(
            access_token=access_token,
            base_url=(base_url or PRODUCTION_BASE_URL).rstrip("/"),
        )
        register_server(config_path, entry)

    except InstallerError as e:
        print(f"Something went wrong: {e.message}", file=sys.stderr)
        return 1

    print(f"  ✓ Using Gumroad URL: {entry.env['GUMROAD_BASE_URL']}")
    print(f"  ✓ Updated {config_path}")
    print()
    print("All done! Restart Claude Desktop to start using Gumroad tools.")
    return 0
