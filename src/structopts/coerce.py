"""
Conversion of raw command-line text into typed field values.
"""

from typing import Any, Callable

from .descriptor import FieldDescriptor, TypeCategory
from .errors import CapacityExceeded, CoercionFailure
from .multi import Multi


def _strict_bool(descriptor: FieldDescriptor, text: str) -> bool:
    """
    Parse a string to a boolean value strictly.

    Only the exact, lowercase words 'true' and 'false' are accepted.
    """
    if text == "true":
        return True
    elif text == "false":
        return False
    raise CoercionFailure(descriptor.name, text, "expected 'true' or 'false'")


def _parse_int(descriptor: FieldDescriptor, text: str) -> int:
    try:
        if text != text.strip():
            raise ValueError(text)
        value = int(text, 10)
    except ValueError:
        raise CoercionFailure(descriptor.name, text, "not an integer") from None

    width = descriptor.width
    if width is not None and not width.min_value <= value <= width.max_value:
        raise CoercionFailure(
            descriptor.name,
            text,
            f"out of range for {width.label} ({width.min_value}..{width.max_value})",
        )
    return value


def _parse_float(descriptor: FieldDescriptor, text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise CoercionFailure(descriptor.name, text, "not a number") from None


def _parse_enum(descriptor: FieldDescriptor, text: str) -> Any:
    try:
        return descriptor.leaf_type[text]
    except KeyError:
        raise CoercionFailure(
            descriptor.name, text, f"expected one of: {', '.join(descriptor.choices)}"
        ) from None


def _parse_literal(descriptor: FieldDescriptor, text: str) -> Any:
    for choice in descriptor.leaf_type:
        if str(choice) == text:
            return choice
    raise CoercionFailure(
        descriptor.name, text, f"expected one of: {', '.join(descriptor.choices)}"
    )


def _parse_str(descriptor: FieldDescriptor, text: str) -> str:
    return text


_LEAF_PARSERS: dict[TypeCategory, Callable[[FieldDescriptor, str], Any]] = {
    TypeCategory.BOOLEAN: _strict_bool,
    TypeCategory.INTEGER: _parse_int,
    TypeCategory.FLOAT: _parse_float,
    TypeCategory.ENUM: _parse_enum,
    TypeCategory.LITERAL: _parse_literal,
    TypeCategory.STRING: _parse_str,
}


def coerce_value(descriptor: FieldDescriptor, text: str) -> Any:
    """
    Convert ``text`` to the value type of ``descriptor``.

    Optional fields coerce their inner type, so a parsed optional is never
    None. Multi fields coerce a single element; use append_value to store it.

    Raises:
        CoercionFailure: If the text is not a valid value for the field.
    """
    return _LEAF_PARSERS[descriptor.leaf](descriptor, text)


def append_value(descriptor: FieldDescriptor, accumulator: Multi, value: Any) -> None:
    """
    Append an already coerced value to a multi field's accumulator.

    Raises:
        CapacityExceeded: If the accumulator is full, naming the field.
    """
    try:
        accumulator.append(value)
    except CapacityExceeded as e:
        raise CapacityExceeded(descriptor.name, e.capacity) from None
