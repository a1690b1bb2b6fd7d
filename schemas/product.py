"""
Pydantic schema for third-party product records
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic_core import PydanticCustomError


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class ProductItem(BaseModel):
    """
    A product as accepted from the remote source.

    Rules:
    - id, sku, title: required strings (not blank)
    - price: required, numeric (numbers or numeric strings), >= 0
    - stock: optional integer >= 0, null allowed

    Unknown fields are kept so the raw record survives the round trip.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    sku: str
    title: str
    price: float
    stock: Optional[int] = None

    @field_validator("id", "sku", "title", mode="before")
    @classmethod
    def require_string(cls, v, info):
        if _is_blank(v):
            raise PydanticCustomError(
                "required", "The {field} field is required.", {"field": info.field_name}
            )
        if not isinstance(v, str):
            raise PydanticCustomError(
                "string_type", "The {field} field must be a string.", {"field": info.field_name}
            )
        return v

    @field_validator("price", mode="before")
    @classmethod
    def require_numeric(cls, v):
        if _is_blank(v):
            raise PydanticCustomError("required", "The price field is required.")
        if isinstance(v, bool) or not isinstance(v, (int, float, str)):
            raise PydanticCustomError("numeric", "The price field must be a number.")
        if isinstance(v, str) and "_" in v:
            raise PydanticCustomError("numeric", "The price field must be a number.")
        try:
            price = float(v)
        except (ValueError, OverflowError):
            raise PydanticCustomError("numeric", "The price field must be a number.")
        if price != price or price in (float("inf"), float("-inf")):
            raise PydanticCustomError("numeric", "The price field must be a number.")
        if price < 0:
            raise PydanticCustomError("min", "The price field must be at least 0.")
        return price

    @field_validator("stock", mode="before")
    @classmethod
    def optional_integer(cls, v):
        if v is None:
            return None
        if isinstance(v, bool):
            raise PydanticCustomError("integer", "The stock field must be an integer.")
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        elif isinstance(v, str) and v.strip().lstrip("+-").isdigit():
            v = int(v.strip())
        if not isinstance(v, int):
            raise PydanticCustomError("integer", "The stock field must be an integer.")
        if v < 0:
            raise PydanticCustomError("min", "The stock field must be at least 0.")
        return v
