"""MCP Tools for Gumroad.

Each tool is a ``ToolHandler``: a name, a description, an input model and an
async function calling one ``GumroadAPIClient`` method. ``TOOL_HANDLERS`` is
the single registry both listing and dispatch are served from.

Tools:
1. gumroad_get_user - Authenticated user's data
2. gumroad_get_products - List products
3. gumroad_get_product - Get one product
4. gumroad_disable_product - Disable a product
5. gumroad_enable_product - Enable a product
6. gumroad_get_sales - List sales with optional filters
7. gumroad_get_offer_codes - List a product's offer codes
8. gumroad_get_offer_code - Get one offer code
9. gumroad_create_offer_code - Create an offer code
10. gumroad_update_offer_code - Update an offer code
11. gumroad_delete_offer_code - Delete an offer code
"""

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import structlog
from mcp.types import TextContent, Tool
from pydantic import BaseModel, ValidationError

from gumroad_mcp.api_client import GumroadAPIClient
from gumroad_mcp.exceptions import (
    InvalidArgumentsError,
    MissingArgumentsError,
    ToolError,
    UnknownToolError,
)
from gumroad_mcp.schemas import (
    CreateOfferCodeInput,
    EmptyInput,
    GetSalesInput,
    OfferCodeIdInput,
    ProductIdInput,
    UpdateOfferCodeInput,
)

logger = structlog.get_logger()

# Encoded in the request path, never sent in a body or query string.
ROUTING_FIELDS = {"product_id", "offer_code_id"}


@dataclass(frozen=True)
class ToolHandler:
    """A tool descriptor paired with the client call it dispatches to."""

    name: str
    description: str
    input_model: type[BaseModel]
    execute: Callable[[GumroadAPIClient, Any], Awaitable[Any]]

    def validate(self, arguments: dict[str, Any]) -> BaseModel:
        """Validate raw arguments into the tool's input model.

        Raises:
            InvalidArgumentsError: If the arguments do not match the schema.
        """
        try:
            return self.input_model.model_validate(arguments)
        except ValidationError as e:
            raise InvalidArgumentsError(self.name, e) from e

    async def run(self, client: GumroadAPIClient, args: BaseModel) -> Any:
        return await self.execute(client, args)

    def descriptor(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.input_model.model_json_schema(),
        )


# ============================================================================
# Tool implementations
# ============================================================================


async def _get_user(client: GumroadAPIClient, args: EmptyInput) -> Any:
    return await client.get_user()


async def _get_products(client: GumroadAPIClient, args: EmptyInput) -> Any:
    return await client.get_products()


async def _get_product(client: GumroadAPIClient, args: ProductIdInput) -> Any:
    return await client.get_product(args.product_id)


async def _disable_product(client: GumroadAPIClient, args: ProductIdInput) -> Any:
    return await client.disable_product(args.product_id)


async def _enable_product(client: GumroadAPIClient, args: ProductIdInput) -> Any:
    return await client.enable_product(args.product_id)


async def _get_sales(client: GumroadAPIClient, args: GetSalesInput) -> Any:
    return await client.get_sales(**args.model_dump())


async def _get_offer_codes(client: GumroadAPIClient, args: ProductIdInput) -> Any:
    return await client.get_offer_codes(args.product_id)


async def _get_offer_code(client: GumroadAPIClient, args: OfferCodeIdInput) -> Any:
    return await client.get_offer_code(args.product_id, args.offer_code_id)


async def _create_offer_code(
    client: GumroadAPIClient,
    args: CreateOfferCodeInput,
) -> Any:
    return await client.create_offer_code(
        product_id=args.product_id,
        name=args.name,
        amount_off=args.amount_off,
        offer_type=args.offer_type,
        max_purchase_count=args.max_purchase_count,
        universal=args.universal,
    )


async def _update_offer_code(
    client: GumroadAPIClient,
    args: UpdateOfferCodeInput,
) -> Any:
    fields = args.model_dump(exclude=ROUTING_FIELDS, exclude_none=True)
    return await client.update_offer_code(
        args.product_id,
        args.offer_code_id,
        **fields,
    )


async def _delete_offer_code(client: GumroadAPIClient, args: OfferCodeIdInput) -> Any:
    return await client.delete_offer_code(args.product_id, args.offer_code_id)


TOOL_HANDLERS: dict[str, ToolHandler] = {
    handler.name: handler
    for handler in (
        ToolHandler(
            name="gumroad_get_user",
            description="Retrieves the authenticated user's data. Available with any scope.",
            input_model=EmptyInput,
            execute=_get_user,
        ),
        ToolHandler(
            name="gumroad_get_products",
            description="Retrieves all of the products",
            input_model=EmptyInput,
            execute=_get_products,
        ),
        ToolHandler(
            name="gumroad_get_product",
            description="Retrieves a single product by its ID",
            input_model=ProductIdInput,
            execute=_get_product,
        ),
        ToolHandler(
            name="gumroad_disable_product",
            description="Disables a product by its ID",
            input_model=ProductIdInput,
            execute=_disable_product,
        ),
        ToolHandler(
            name="gumroad_enable_product",
            description="Enables a product by its ID",
            input_model=ProductIdInput,
            execute=_enable_product,
        ),
        ToolHandler(
            name="gumroad_get_sales",
            description=(
                "Retrieves all of the successful sales. "
                "Results are paginated; pass next_page_key as page_key "
                "to fetch the next page."
            ),
            input_model=GetSalesInput,
            execute=_get_sales,
        ),
        ToolHandler(
            name="gumroad_get_offer_codes",
            description="Retrieves all of the offer codes of a product",
            input_model=ProductIdInput,
            execute=_get_offer_codes,
        ),
        ToolHandler(
            name="gumroad_get_offer_code",
            description="Retrieves a single offer code of a product by its ID",
            input_model=OfferCodeIdInput,
            execute=_get_offer_code,
        ),
        ToolHandler(
            name="gumroad_create_offer_code",
            description=(
                "Creates a new offer code for a product. "
                "amount_off is in cents unless offer_type is 'percent'."
            ),
            input_model=CreateOfferCodeInput,
            execute=_create_offer_code,
        ),
        ToolHandler(
            name="gumroad_update_offer_code",
            description="Edits an existing offer code of a product (e.g. max_purchase_count)",
            input_model=UpdateOfferCodeInput,
            execute=_update_offer_code,
        ),
        ToolHandler(
            name="gumroad_delete_offer_code",
            description="Permanently deletes an offer code of a product",
            input_model=OfferCodeIdInput,
            execute=_delete_offer_code,
        ),
    )
}


def text_result(payload: Any) -> list[TextContent]:
    """Wrap a JSON-serializable payload as a single text content block."""
    text = json.dumps(payload, separators=(",", ":"), ensure_ascii=False)
    return [TextContent(type="text", text=text)]


class ToolDispatcher:
    """Serves tool listing and routes tool calls to the Gumroad API client.

    Calls are independent: the dispatcher keeps no state besides the
    read-only client and handler registry.
    """

    def __init__(
        self,
        api_client: GumroadAPIClient,
        handlers: dict[str, ToolHandler] | None = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            api_client: Gumroad API client.
            handlers: Tool registry. Defaults to TOOL_HANDLERS.
        """
        self.api = api_client
        self.handlers = handlers if handlers is not None else TOOL_HANDLERS

    def list_tools(self) -> list[Tool]:
        """List all available MCP tools."""
        return [handler.descriptor() for handler in self.handlers.values()]

    async def call_tool(
        self,
        name: str,
        arguments: dict[str, Any] | None,
    ) -> list[TextContent]:
        """Handle tool invocation.

        The raw Gumroad response is returned as JSON text, including
        ``success: false`` bodies. Any failure is reported as an
        ``{"error": message}`` payload instead of being raised.
        """
        logger.info("Tool called", tool=name, arguments=arguments)

        try:
            if arguments is None:
                raise MissingArgumentsError()

            handler = self.handlers.get(name)
            if handler is None:
                raise UnknownToolError(name)

            args = handler.validate(arguments)
            result = await handler.run(self.api, args)

        except ToolError as e:
            logger.warning("Tool call rejected", tool=name, error=e.message)
            return text_result({"error": e.message})
        except Exception as e:
            logger.exception("Tool execution failed", tool=name)
            return text_result({"error": str(e)})

        logger.info("Tool completed", tool=name)
        return text_result(result)
