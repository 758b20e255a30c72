"""Gumroad MCP exceptions.

Tool errors are raised while validating or dispatching a tool call and are
converted into an ``{"error": message}`` payload at the call boundary.
Upstream errors come from the HTTP transport.
"""

from typing import Any

from pydantic import ValidationError


class GumroadMCPError(Exception):
    """Base class for all Gumroad MCP exceptions."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Tool Dispatch Errors
# ============================================================================


class ToolError(GumroadMCPError):
    """Raised when a tool call cannot be dispatched."""


class MissingArgumentsError(ToolError):
    """Raised when a tool call carries no argument map at all."""

    def __init__(self) -> None:
        super().__init__("No arguments provided")


class UnknownToolError(ToolError):
    """Raised when the requested tool is not registered."""

    def __init__(self, tool_name: str) -> None:
        super().__init__(
            f"Unknown tool: {tool_name}",
            details={"tool_name": tool_name},
        )


class InvalidArgumentsError(ToolError):
    """Raised when tool arguments fail schema validation."""

    def __init__(self, tool_name: str, error: ValidationError) -> None:
        super().__init__(
            format_validation_error(error, f"Invalid arguments for {tool_name}"),
            details={"tool_name": tool_name, "errors": error.errors()},
        )


# ============================================================================
# Upstream Errors
# ============================================================================


class UpstreamRequestError(GumroadMCPError):
    """Raised when a request to the Gumroad API fails at the transport level.

    Non-2xx responses are not errors; their bodies are returned as-is.
    """

    def __init__(self, method: str, path: str, reason: str) -> None:
        super().__init__(
            f"Request failed: {method} {path}: {reason}",
            details={"method": method, "path": path},
        )


# ============================================================================
# Installer Errors
# ============================================================================


class InstallerError(GumroadMCPError):
    """Raised when the host application config cannot be updated."""


def format_validation_error(error: ValidationError, label: str) -> str:
    """Render a pydantic ValidationError as a label plus one line per field."""
    lines = []
    for err in error.errors():
        path = ".".join(str(part) for part in err["loc"])
        prefix = f"{path}: " if path else ""
        received = ""
        if "input" in err and err["type"] != "missing":
            received = f" (received: {err['input']!r})"
        lines.append(f"{prefix}{err['msg']}{received}")
    return "\n".join([label, *lines])
