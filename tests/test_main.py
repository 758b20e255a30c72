"""Tests for MCP server main module."""

import json

import pytest
from mcp import types
from pydantic import SecretStr
from unittest.mock import patch

from gumroad_mcp.api_client import GumroadAPIClient
from gumroad_mcp.config import Settings
from gumroad_mcp.main import build_api_client, build_parser, create_mcp_server, main


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_settings(self):
        """Test default settings values."""
        with patch.dict("os.environ", {}, clear=True):
            settings = Settings(_env_file=None)
            assert settings.gumroad_access_token is None
            assert settings.gumroad_base_url == "https://api.gumroad.com"
            assert settings.log_level == "INFO"

    def test_settings_from_env(self):
        """Test settings from environment variables."""
        env_vars = {
            "GUMROAD_ACCESS_TOKEN": "env-token",
            "GUMROAD_BASE_URL": "https://gumroad.dev",
            "LOG_LEVEL": "DEBUG",
        }
        with patch.dict("os.environ", env_vars, clear=False):
            settings = Settings(_env_file=None)
            assert settings.gumroad_access_token.get_secret_value() == "env-token"
            assert settings.gumroad_base_url == "https://gumroad.dev"
            assert settings.log_level == "DEBUG"

    def test_token_is_masked(self):
        """Test the token is hidden from the settings repr."""
        settings = Settings(_env_file=None, gumroad_access_token="env-token")
        assert "env-token" not in repr(settings)


class TestStartup:
    """Tests for startup and the command line."""

    def test_build_api_client(self):
        """Test client construction from settings."""
        settings = Settings(
            _env_file=None,
            gumroad_access_token=SecretStr("token"),
            gumroad_base_url="https://gumroad.dev",
        )

        client = build_api_client(settings)

        assert isinstance(client, GumroadAPIClient)
        assert client.api_url == "https://gumroad.dev/v2"
        assert client.transport_config.verify_tls is False

    @pytest.mark.parametrize("token", [None, ""])
    def test_build_api_client_requires_token(self, token):
        """Test a missing or empty token is rejected."""
        settings = Settings(_env_file=None, gumroad_access_token=token)

        with pytest.raises(ValueError, match="GUMROAD_ACCESS_TOKEN"):
            build_api_client(settings)

    def test_main_exits_without_token(self, capsys):
        """Test the server refuses to start without a token."""
        with patch.dict("os.environ", {}, clear=True), \
                patch("gumroad_mcp.main.Settings", lambda: Settings(_env_file=None)), \
                patch("gumroad_mcp.main.configure_logging"), \
                patch("gumroad_mcp.main.asyncio.run") as mock_run:
            with pytest.raises(SystemExit) as exc_info:
                main([])

        assert exc_info.value.code == 1
        assert "GUMROAD_ACCESS_TOKEN" in capsys.readouterr().err
        mock_run.assert_not_called()

    def test_main_init_subcommand(self, tmp_path):
        """Test the init subcommand delegates to the installer."""
        config_path = tmp_path / "claude_desktop_config.json"

        with patch("gumroad_mcp.main.run_init", return_value=0) as mock_init:
            with pytest.raises(SystemExit) as exc_info:
                main([
                    "init",
                    "--access-token", "cli-token",
                    "--base-url", "https://gumroad.dev",
                    "--config-path", str(config_path),
                ])

        assert exc_info.value.code == 0
        mock_init.assert_called_once_with(
            access_token="cli-token",
            base_url="https://gumroad.dev",
            config_path=config_path,
        )

    def test_init_defaults_from_env(self):
        """Test init options fall back to environment variables."""
        env_vars = {"GUMROAD_ACCESS_TOKEN": "env-token"}
        with patch.dict("os.environ", env_vars, clear=True):
            args = build_parser().parse_args(["init"])

        assert args.access_token == "env-token"
        assert args.base_url is None
        assert args.config_path is None


class TestMCPServer:
    """Tests for MCP server creation."""

    @pytest.fixture
    def server(self, dispatcher):
        return create_mcp_server(dispatcher)

    def test_create_server(self, server):
        """Test MCP server creation."""
        assert server.name == "gumroad-mcp"

    @pytest.mark.asyncio
    async def test_list_tools(self, server, dispatcher):
        """Test listing tools through the protocol handler."""
        handler = server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))

        names = {tool.name for tool in result.root.tools}
        assert names == set(dispatcher.handlers)

    @pytest.mark.asyncio
    async def test_call_tool(self, server, mock_api_client):
        """Test calling a tool through the protocol handler."""
        mock_api_client.get_product.return_value = {"success": True, "product": {"id": "p1"}}
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(
                    name="gumroad_get_product",
                    arguments={"product_id": "p1"},
                ),
            )
        )

        assert result.root.isError is False
        assert json.loads(result.root.content[0].text) == {
            "success": True,
            "product": {"id": "p1"},
        }

    @pytest.mark.asyncio
    async def test_call_tool_validation_error_is_payload(self, server, mock_api_client):
        """Test invalid arguments come back as an error payload."""
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(
                    name="gumroad_create_offer_code",
                    arguments={"product_id": "p1", "name": "X", "amount_off": "ten"},
                ),
            )
        )

        assert result.root.isError is False
        assert "amount_off" in json.loads(result.root.content[0].text)["error"]
        mock_api_client.create_offer_code.assert_not_called()

    @pytest.mark.asyncio
    async def test_call_tool_without_arguments(self, server, mock_api_client):
        """Test a call with no argument map is rejected before any request."""
        mock_api_client.get_user.return_value = {"success": True}
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name="gumroad_get_user"),
            )
        )

        assert result.root.isError is False
        assert json.loads(result.root.content[0].text) == {
            "error": "No arguments provided",
        }
        mock_api_client.get_user.assert_not_called()

    @pytest.mark.asyncio
    async def test_call_unknown_tool(self, server):
        """Test unknown tools come back as an error payload."""
        handler = server.request_handlers[types.CallToolRequest]

        result = await handler(
            types.CallToolRequest(
                method="tools/call",
                params=types.CallToolRequestParams(name="gumroad_refund_sale", arguments={}),
            )
        )

        assert result.root.isError is False
        assert "Unknown tool: gumroad_refund_sale" in result.root.content[0].text
