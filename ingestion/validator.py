"""
Validate raw product items against the product schema
"""

from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, Field, ValidationError
from schemas.product import ProductItem


class ValidationResult(BaseModel):
    """
    Outcome of validating one item (ephemeral, never persisted).

    Either valid with the parsed product, or invalid with
    field name -> messages.
    """

    valid: bool
    product: Optional[ProductItem] = None
    errors: Dict[str, List[str]] = Field(default_factory=dict)

    @classmethod
    def ok(cls, product: ProductItem) -> "ValidationResult":
        return cls(valid=True, product=product)

    @classmethod
    def failed(cls, errors: Dict[str, List[str]]) -> "ValidationResult":
        return cls(valid=False, errors=errors)


def extract_external_id(item: Any) -> Optional[str]:
    """Return the item's "id" as a string, or None when absent or not a scalar."""
    if not isinstance(item, Mapping):
        return None
    value = item.get("id")
    if value is None or isinstance(value, (bool, dict, list)):
        return None
    value = str(value)
    return value or None


class ItemValidator:
    """
    Apply the fixed product rule set to one item.

    Pure: the same item always yields the same verdict and errors.
    """

    def validate(self, item: Any) -> ValidationResult:
        if not isinstance(item, Mapping):
            return ValidationResult.failed({"item": ["The item must be an object."]})

        try:
            product = ProductItem.model_validate(dict(item))
        except ValidationError as e:
            return ValidationResult.failed(self._collect_errors(e))

        return ValidationResult.ok(product)

    @staticmethod
    def _collect_errors(error: ValidationError) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        for detail in error.errors():
            field = str(detail["loc"][0]) if detail["loc"] else "item"
            if detail["type"] == "missing":
                message = f"The {field} field is required."
            else:
                message = detail["msg"]
            errors.setdefault(field, []).append(message)
        return errors
