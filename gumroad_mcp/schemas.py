"""Tool input schemas.

One pydantic model per tool. The JSON schema of each model is advertised
as the tool's ``inputSchema`` and the model validates incoming arguments.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class EmptyInput(BaseModel):
    """Input schema for tools without parameters."""


class ProductIdInput(BaseModel):
    """Input schema for tools addressing a single product."""

    product_id: str = Field(
        ...,
        description="The ID of the product.",
    )


class GetSalesInput(BaseModel):
    """Input schema for gumroad_get_sales tool."""

    # Gumroad reports order_id as a number.
    model_config = ConfigDict(coerce_numbers_to_str=True)

    after: str | None = Field(
        None,
        pattern=DATE_PATTERN,
        description="Only return sales after this date (YYYY-MM-DD).",
    )
    before: str | None = Field(
        None,
        pattern=DATE_PATTERN,
        description="Only return sales before this date (YYYY-MM-DD).",
    )
    product_id: str | None = Field(
        None,
        description="Filter sales by this product.",
    )
    email: str | None = Field(
        None,
        description="Filter sales by this email.",
    )
    order_id: str | None = Field(
        None,
        description="Filter sales by this Order ID.",
    )
    page_key: str | None = Field(
        None,
        description="A key representing a page of results, "
        "as returned in next_page_key.",
    )


class OfferCodeIdInput(BaseModel):
    """Input schema for tools addressing a single offer code."""

    product_id: str = Field(
        ...,
        description="The ID of the product the offer code belongs to.",
    )
    offer_code_id: str = Field(
        ...,
        description="The ID of the offer code.",
    )


class CreateOfferCodeInput(BaseModel):
    """Input schema for gumroad_create_offer_code tool."""

    product_id: str = Field(
        ...,
        description="The ID of the product to create the offer code for.",
    )
    name: str = Field(
        ...,
        description="The coupon code customers enter at checkout. Example: 'SAVE10'",
    )
    amount_off: StrictInt | StrictFloat = Field(
        ...,
        description="Discount amount: cents when offer_type is 'cents', "
        "a percentage when it is 'percent'.",
    )
    offer_type: Literal["cents", "percent"] | None = Field(
        None,
        description="Type of discount: 'cents' (default) or 'percent'.",
    )
    max_purchase_count: int | None = Field(
        None,
        ge=0,
        description="Maximum number of times the code can be used.",
    )
    universal: bool | None = Field(
        None,
        description="Whether the offer code applies to all products.",
    )


class UpdateOfferCodeInput(BaseModel):
    """Input schema for gumroad_update_offer_code tool.

    Fields other than the routing IDs are forwarded to Gumroad as-is.
    """

    model_config = ConfigDict(extra="allow")

    product_id: str = Field(
        ...,
        description="The ID of the product the offer code belongs to.",
    )
    offer_code_id: str = Field(
        ...,
        description="The ID of the offer code to update.",
    )
    max_purchase_count: int | None = Field(
        None,
        ge=0,
        description="New maximum number of times the code can be used.",
    )
