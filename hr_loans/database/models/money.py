from decimal import Decimal
from typing import Any, Optional
from bson import Decimal128


def to_decimal(value: Any) -> Any:
    """Unwrap BSON Decimal128 values read back from MongoDB."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    return value


def to_decimal128(value: Optional[Decimal]) -> Optional[Decimal128]:
    if value is None:
        return None
    return Decimal128(str(value))
