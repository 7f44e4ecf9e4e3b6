"""
Modèles du panier et du coupon (entrées client), validés avec pydantic.
Les montants sont des entiers en centimes (USD).
"""
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class DiscountType(str, Enum):
    FIXED_AMOUNT = "fixed_amount"
    PERCENTAGE = "percentage"
    FREE_SHIPPING = "free_shipping"
    NO_TAX = "no_tax"
    FULL_DISCOUNT = "full_discount"


def _to_str(v: Any) -> Any:
    # Les ids arrivent parfois en int depuis le front
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    if isinstance(v, str):
        return v.strip()
    return v


class CartItem(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(min_length=1)
    name: str = "Item"
    description: Optional[str] = None
    image_url: Optional[str] = None
    # strict: "1000" ou true ne sont pas des montants
    price: int = Field(ge=0, strict=True)
    quantity: int = Field(gt=0, strict=True)

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, v: Any) -> Any:
        return _to_str(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> Any:
        return v if v else "Item"

    @field_validator("description", "image_url", mode="before")
    @classmethod
    def empty_to_none(cls, v: Any) -> Any:
        return v or None

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


class Coupon(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: Optional[str] = None
    code: Optional[str] = None
    discount_type: DiscountType
    discount_value: float = Field(default=0, allow_inf_nan=False)

    @field_validator("id", "code", mode="before")
    @classmethod
    def normalize_ids(cls, v: Any) -> Any:
        return _to_str(v)

    @field_validator("discount_value", mode="before")
    @classmethod
    def null_value(cls, v: Any) -> Any:
        return 0 if v is None else v
