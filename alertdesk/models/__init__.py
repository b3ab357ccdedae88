"""Data models for AlertDesk."""

from alertdesk.models.alert import (
    DIRECTIONS,
    FIELD_NAMES,
    HIT_SIDES,
    AlertDraft,
    AlertRecord,
    Category,
    Direction,
    Envelope,
    HitSide,
    coerce_field,
    direction_to_hit_side,
    format_price,
    hit_side_to_direction,
    normalize_direction,
    normalize_hit_side,
    normalize_record,
    parse_price,
    step_price,
)

__all__ = [
    "DIRECTIONS",
    "FIELD_NAMES",
    "HIT_SIDES",
    "AlertDraft",
    "AlertRecord",
    "Category",
    "Direction",
    "Envelope",
    "HitSide",
    "coerce_field",
    "direction_to_hit_side",
    "format_price",
    "hit_side_to_direction",
    "normalize_direction",
    "normalize_hit_side",
    "normalize_record",
    "parse_price",
    "step_price",
]
