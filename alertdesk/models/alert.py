"""Alert data models.

The alert service speaks in its own field names (``_id``, ``script_name``,
``alert_for``, ``hit_side``); the models below accept those names or the
Python ones and always hand back canonical values, so nothing past this
module has to care how a field arrived.
"""

import math
from decimal import Decimal, InvalidOperation
from enum import IntEnum
from typing import Annotated, Any, Literal, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from alertdesk.errors import ValidationError


HitSide = Literal["BUY", "SHORT"]
Direction = Literal["ABOVE", "BELOW"]

HIT_SIDES: tuple[str, ...] = ("BUY", "SHORT")
DIRECTIONS: tuple[str, ...] = ("ABOVE", "BELOW")

# Values posted by the old web form's direction select
_LEGACY_DIRECTIONS = {"UPPER": "ABOVE", "LOWER": "BELOW"}

_DIRECTION_TO_HIT_SIDE = {"ABOVE": "BUY", "BELOW": "SHORT"}
_HIT_SIDE_TO_DIRECTION = {side: direction for direction, side in _DIRECTION_TO_HIT_SIDE.items()}

FIELD_NAMES: tuple[str, ...] = ("instrument", "category", "side", "price", "comment")


class Category(IntEnum):
    """Holding horizon an alert is meant for."""

    INTRADAY = 0
    SWING = 1
    WEEKLY = 2
    LONGTERM = 3
    STOCK_OPTION = 4

    @property
    def label(self) -> str:
        """Display name, e.g. ``Stock Option``."""
        return self.name.replace("_", " ").title()

    @classmethod
    def parse(cls, value: Any) -> "Category":
        """Coerce an int, numeric string or name into a Category.

        Args:
            value: ``1``, ``"1"``, ``"swing"``, ``"stock-option"`` ...

        Returns:
            The matching Category.

        Raises:
            ValidationError: If the value names no category.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                raise ValidationError(f"Unknown alert category: {value!r}") from None
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.parse(int(text))
            key = text.upper().replace("-", "_").replace(" ", "_")
            if key in cls.__members__:
                return cls[key]
        raise ValidationError(f"Unknown alert category: {value!r}")


def normalize_hit_side(value: Any) -> Optional[str]:
    """Canonical BUY/SHORT value; blank means unset."""
    if value is None:
        return None
    text = str(value).strip().upper()
    if not text:
        return None
    if text not in HIT_SIDES:
        raise ValidationError(f"Hit side must be one of {', '.join(HIT_SIDES)}, got {value!r}")
    return text


def normalize_direction(value: Any) -> str:
    """Canonical ABOVE/BELOW value, accepting the legacy UPPER/LOWER."""
    text = str(value or "").strip().upper()
    text = _LEGACY_DIRECTIONS.get(text, text)
    if text not in DIRECTIONS:
        raise ValidationError(f"Direction must be one of {', '.join(DIRECTIONS)}, got {value!r}")
    return text


def direction_to_hit_side(direction: str) -> str:
    """Map a pending threshold direction to the side stored on the record."""
    return _DIRECTION_TO_HIT_SIDE[normalize_direction(direction)]


def hit_side_to_direction(side: Optional[str]) -> Optional[str]:
    """Map a stored side back to the direction shown in the form."""
    side = normalize_hit_side(side)
    if side is None:
        return None
    return _HIT_SIDE_TO_DIRECTION[side]


def format_price(value: Any) -> str:
    """Render a price without a trailing ``.0``."""
    number = Decimal(str(value))
    if number == number.to_integral_value():
        return str(int(number))
    return str(number)


def parse_price(text: Any, allow_zero: bool = False) -> float:
    """Parse price text entered by the user.

    The stepper never goes below zero and typed input is held to the
    same floor.

    Args:
        text: Raw price text (or number).
        allow_zero: Accept ``0`` as a price.

    Returns:
        The price as a float.

    Raises:
        ValidationError: If the text is empty, not a finite number,
            negative, or zero when zero is not allowed.
    """
    if text is None or isinstance(text, bool) or str(text).strip() == "":
        raise ValidationError("Price is required")
    try:
        number = Decimal(str(text).strip())
    except InvalidOperation:
        raise ValidationError(f"Price must be a number, got {text!r}") from None
    if not number.is_finite():
        raise ValidationError(f"Price must be a finite number, got {text!r}")
    if number < 0:
        raise ValidationError("Price cannot be negative")
    if number == 0 and not allow_zero:
        raise ValidationError("Price is required")
    price = float(number)
    if not math.isfinite(price):
        raise ValidationError(f"Price is out of range, got {text!r}")
    return price


def step_price(text: Any, delta: int) -> str:
    """Move price text by ``delta``, flooring at zero.

    Text that does not parse as a number counts as zero.
    """
    try:
        current = Decimal(str(text).strip() or "0")
    except InvalidOperation:
        current = Decimal(0)
    if not current.is_finite():
        current = Decimal(0)
    return format_price(max(Decimal(0), current + delta))


def coerce_field(name: str, value: Any, side_kind: str = "direction") -> Any:
    """Apply the field-editing rule shared by the form and the list rows.

    Args:
        name: One of FIELD_NAMES.
        value: Raw value from the user.
        side_kind: ``direction`` (ABOVE/BELOW, authoring flow) or
            ``hit_side`` (BUY/SHORT, listed alerts).

    Returns:
        The coerced value. Price stays as text until it is submitted.

    Raises:
        ValidationError: If the field is unknown or the value is invalid.
    """
    if name == "instrument":
        return str(value or "").strip().upper()
    if name == "category":
        return Category.parse(value)
    if name == "side":
        if side_kind == "hit_side":
            return normalize_hit_side(value)
        return normalize_direction(value)
    if name == "price":
        return "" if value is None else str(value).strip()
    if name == "comment":
        return "" if value is None else str(value)
    raise ValidationError(f"Unknown alert field {name!r}, expected one of {', '.join(FIELD_NAMES)}")


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _upper(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().upper()
    return value


def _optional_upper(value: Any) -> Any:
    return _blank_to_none(_upper(value))


def _category_input(value: Any) -> Any:
    if value is None or value == "":
        return Category.SWING
    return _optional_category(value)


def _optional_category(value: Any) -> Any:
    if value is None or value == "":
        return None
    try:
        return Category.parse(value)
    except ValidationError as e:
        raise ValueError(str(e)) from e


class _AlertFields(BaseModel):
    """Fields shared by drafts and persisted alerts."""

    instrument: Annotated[str, BeforeValidator(_upper)] = Field(
        ..., alias="script_name", min_length=1, description="Trading symbol"
    )
    comment: str = Field(default="", description="Free-text note")

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("comment", mode="before")
    @classmethod
    def _comment_default(cls, value: Any) -> Any:
        return "" if value is None else value

    def to_wire(self) -> dict:
        """Serialize with the service's field names, without the id."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})


class AlertDraft(_AlertFields):
    """An alert that has not been persisted yet and has no identity."""

    category: Annotated[Category, BeforeValidator(_category_input)] = Field(
        default=Category.SWING, alias="alert_for", description="Alert horizon"
    )
    side: Annotated[HitSide, BeforeValidator(_upper)] = Field(
        ..., alias="hit_side", description="Side taken when the alert hits"
    )
    price: float = Field(..., ge=0, description="Threshold price")


class AlertRecord(_AlertFields):
    """An alert persisted by the alert service."""

    id: str = Field(..., alias="_id", min_length=1, description="Service-assigned ID")
    # None when the service sent no category; each flow applies its own default
    category: Annotated[Optional[Category], BeforeValidator(_optional_category)] = Field(
        default=None, alias="alert_for", description="Alert horizon"
    )
    side: Annotated[Optional[HitSide], BeforeValidator(_optional_upper)] = Field(
        default=None, alias="hit_side", description="Side taken when the alert hits"
    )
    # Stored as the service returns it; the floor is enforced on what we write
    price: Annotated[Optional[float], BeforeValidator(_blank_to_none)] = Field(
        default=None, description="Threshold price"
    )

    @field_validator("id", mode="before")
    @classmethod
    def _id_to_str(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


def normalize_record(raw: Any) -> AlertRecord:
    """Build an AlertRecord from a service payload.

    Raises:
        pydantic.ValidationError: If the payload cannot be coerced.
    """
    if isinstance(raw, AlertRecord):
        return raw
    return AlertRecord.model_validate(raw)


class Envelope(BaseModel):
    """Response envelope returned by every alert service endpoint."""

    status_code: Optional[int] = Field(default=None, alias="statusCode")
    data: Any = None
    message: Optional[str] = None

    model_config = {"populate_by_name": True}

    @field_validator("message", mode="before")
    @classmethod
    def _message_to_str(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @property
    def ok(self) -> bool:
        return self.status_code == 200
