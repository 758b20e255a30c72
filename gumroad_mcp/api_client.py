"""Gumroad API Client.

Thin HTTP client for the Gumroad v2 REST API. Each method issues exactly one
request and returns the parsed JSON body unmodified; Gumroad reports business
failures through the ``success`` field of the body, so status codes are not
inspected here.
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from gumroad_mcp.config import PRODUCTION_BASE_URL
from gumroad_mcp.exceptions import UpstreamRequestError

logger = structlog.get_logger()


@dataclass(frozen=True)
class TransportConfig:
    """Per-client transport settings.

    Certificate verification is relaxed only for non-production hosts
    (e.g. gumroad.dev), and only for the client built from this config.
    """

    base_url: str
    verify_tls: bool = True

    @classmethod
    def for_base_url(cls, base_url: str | None = None) -> "TransportConfig":
        """Build the transport config for a base URL override."""
        url = (base_url or PRODUCTION_BASE_URL).rstrip("/")
        return cls(base_url=url, verify_tls=url == PRODUCTION_BASE_URL)

    @property
    def api_url(self) -> str:
        """Versioned API root."""
        return f"{self.base_url}/v2"


class GumroadAPIClient:
    """HTTP client for the Gumroad REST API.

    Provides one method per Gumroad endpoint used by the MCP tools.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the API client.

        Args:
            access_token: Gumroad API access token.
            base_url: Optional base URL override. Defaults to production.
            http_transport: Optional httpx transport (used by tests).
        """
        self.transport_config = TransportConfig.for_base_url(base_url)
        self._access_token = access_token
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

        logger.info(
            "Gumroad client initialized",
            api_url=self.api_url,
            verify_tls=self.transport_config.verify_tls,
        )

    @property
    def api_url(self) -> str:
        return self.transport_config.api_url

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.api_url,
                verify=self.transport_config.verify_tls,
                transport=self._http_transport,
                headers={
                    "Authorization": f"Bearer {self._access_token}",
                    "Content-Type": "application/json",
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make an API request and return the decoded JSON body.

        Args:
            method: HTTP method.
            path: Endpoint path relative to the versioned API root.
            json: Request body as JSON.
            params: Query parameters, appended in insertion order.

        Returns:
            The parsed response body, whatever the status code.

        Raises:
            UpstreamRequestError: On transport failure or a non-JSON body.
        """
        client = await self._get_client()

        logger.debug(
            "Making API request",
            method=method,
            path=path,
            has_body=json is not None,
        )

        try:
            response = await client.request(
                method=method,
                url=path,
                json=json,
                params=params or None,
            )
        except httpx.HTTPError as e:
            logger.error("API request failed", method=method, path=path, error=str(e))
            raise UpstreamRequestError(method, path, str(e) or type(e).__name__) from e

        try:
            return response.json()
        except ValueError as e:
            logger.error(
                "API response is not JSON",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise UpstreamRequestError(
                method,
                path,
                f"invalid JSON response (HTTP {response.status_code})",
            ) from e

    # =========================================================================
    # User Endpoints
    # =========================================================================

    async def get_user(self) -> Any:
        """Get the authenticated user's data."""
        return await self._request("GET", "/user")

    # =========================================================================
    # Product Endpoints
    # =========================================================================

    async def get_products(self) -> Any:
        """List all products of the authenticated user."""
        return await self._request("GET", "/products")

    async def get_product(self, product_id: str) -> Any:
        """Get a product by ID.

        Args:
            product_id: Product identifier.
        """
        return await self._request("GET", f"/products/{product_id}")

    async def disable_product(self, product_id: str) -> Any:
        """Disable (unpublish) a product.

        Args:
            product_id: Product identifier.
        """
        return await self._request("PUT", f"/products/{product_id}/disable")

    async def enable_product(self, product_id: str) -> Any:
        """Enable (publish) a product.

        Args:
            product_id: Product identifier.
        """
        return await self._request("PUT", f"/products/{product_id}/enable")

    # =========================================================================
    # Sales Endpoints
    # =========================================================================

    async def get_sales(
        self,
        after: str | None = None,
        before: str | None = None,
        product_id: str | None = None,
        email: str | None = None,
        order_id: str | None = None,
        page_key: str | None = None,
    ) -> Any:
        """List successful sales, optionally filtered.

        Args:
            after: Only sales after this date (YYYY-MM-DD).
            before: Only sales before this date (YYYY-MM-DD).
            product_id: Filter by product.
            email: Filter by buyer email.
            order_id: Filter by order ID.
            page_key: Key of the results page to fetch.

        Returns:
            Sales page, including ``next_page_key`` when more results exist.
        """
        filters = {
            "after": after,
            "before": before,
            "product_id": product_id,
            "email": email,
            "order_id": order_id,
            "page_key": page_key,
        }
        # Only present filters, in the order above.
        params = {k: v for k, v in filters.items() if v}
        return await self._request("GET", "/sales", params=params)

    # =========================================================================
    # Offer Code Endpoints
    # =========================================================================

    async def get_offer_codes(self, product_id: str) -> Any:
        """List the offer codes of a product.

        Args:
            product_id: Product identifier.
        """
        return await self._request("GET", f"/products/{product_id}/offer_codes")

    async def get_offer_code(self, product_id: str, offer_code_id: str) -> Any:
        """Get a single offer code.

        Args:
            product_id: Product identifier.
            offer_code_id: Offer code identifier.
        """
        return await self._request(
            "GET",
            f"/products/{product_id}/offer_codes/{offer_code_id}",
        )

    async def create_offer_code(
        self,
        product_id: str,
        name: str,
        amount_off: int | float,
        offer_type: str | None = None,
        max_purchase_count: int | None = None,
        universal: bool | None = None,
    ) -> Any:
        """Create an offer code for a product.

        Args:
            product_id: Product identifier.
            name: Coupon code customers enter at checkout.
            amount_off: Discount amount, in cents or percent.
            offer_type: ``cents`` (default upstream) or ``percent``.
            max_purchase_count: Maximum number of uses.
            universal: Whether the code applies to all products.

        Returns:
            Response body with the created offer code.
        """
        body: dict[str, Any] = {"name": name, "amount_off": amount_off}
        if offer_type is not None:
            body["offer_type"] = offer_type
        if max_purchase_count is not None:
            body["max_purchase_count"] = max_purchase_count
        if universal is not None:
            body["universal"] = universal

        return await self._request(
            "POST",
            f"/products/{product_id}/offer_codes",
            json=body,
        )

    async def update_offer_code(
        self,
        product_id: str,
        offer_code_id: str,
        **fields: Any,
    ) -> Any:
        """Update an offer code.

        Args:
            product_id: Product identifier.
            offer_code_id: Offer code identifier.
            **fields: Fields to update, commonly ``max_purchase_count``.
        """
        return await self._request(
            "PUT",
            f"/products/{product_id}/offer_codes/{offer_code_id}",
            json=fields,
        )

    async def delete_offer_code(self, product_id: str, offer_code_id: str) -> Any:
        """Delete an offer code.

        Args:
            product_id: Product identifier.
            offer_code_id: Offer code identifier.
        """
        return await self._request(
            "DELETE",
            f"/products/{product_id}/offer_codes/{offer_code_id}",
        )
