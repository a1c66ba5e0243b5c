"""
DropForge - Ledger Value Decoder

Converts the node's generic Move value representation into application
values. Domain values arrive nested under "fields" wrappers, u64 numbers
arrive as decimal strings, and the same logical string may be a JSON
string or a vector<u8> (a list of ints) depending on the declared Move
type. Every value is first classified into a small closed set of shapes;
anything outside that set is rejected with UnrecognizedValueShape.
"""

from enum import Enum
from typing import Any, Callable, List, Optional, TypeVar, Union

from ..exceptions import DropForgeError, UnrecognizedValueShape

T = TypeVar("T")


class ValueShape(str, Enum):
    """Recognized ledger value shapes."""
    TEXT = "text"
    BYTES = "bytes"
    RECORD = "record"
    LIST = "list"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ABSENT = "absent"


class _Absent:
    """Marker for a field that is not present."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "ABSENT"


ABSENT = _Absent()


def is_absent(value: Any) -> bool:
    return value is ABSENT or value is None


def _is_byte_vector(value: list) -> bool:
    return bool(value) and all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value
    )


def classify(value: Any) -> ValueShape:
    """
    Classify a ledger value.

    An empty list classifies as LIST; decode_text still accepts it as the
    empty byte vector.

    Raises:
        UnrecognizedValueShape: For floats and other non-ledger types
    """
    if is_absent(value):
        return ValueShape.ABSENT
    if isinstance(value, bool):
        return ValueShape.BOOLEAN
    if isinstance(value, int):
        return ValueShape.INTEGER
    if isinstance(value, str):
        return ValueShape.TEXT
    if isinstance(value, list):
        return ValueShape.BYTES if _is_byte_vector(value) else ValueShape.LIST
    if isinstance(value, dict):
        return ValueShape.RECORD
    raise UnrecognizedValueShape(f"Unrecognized ledger value of type {type(value).__name__}: {value!r}")


def field(value: Any, name: str) -> Any:
    """
    Look up a named field one level inside a record.

    Wrapped records ({"type": ..., "fields": {...}}) are searched inside
    their "fields" mapping; bare mappings (such as a UID {"id": "0x.."})
    are searched directly.

    Returns:
        The field value, or ABSENT
    """
    if not isinstance(value, dict):
        return ABSENT

    container = value.get("fields")
    if not isinstance(container, dict):
        container = value

    if name not in container or container[name] is None:
        return ABSENT
    return container[name]


def field_path(value: Any, *names: str) -> Any:
    """Follow a chain of field lookups; ABSENT as soon as one is missing."""
    for name in names:
        value = field(value, name)
        if value is ABSENT:
            return ABSENT
    return value


def _shape(value: Any) -> Optional[ValueShape]:
    try:
        return classify(value)
    except UnrecognizedValueShape:
        return None


def decode_text(value: Any) -> Optional[str]:
    """
    Decode a string stored either natively or as a UTF-8 byte vector.

    Never raises; returns None for any other shape or invalid UTF-8.
    """
    shape = _shape(value)
    if shape is ValueShape.TEXT:
        return value
    if shape is ValueShape.BYTES:
        try:
            return bytes(value).decode('utf-8')
        except UnicodeDecodeError:
            return None
    if shape is ValueShape.LIST and not value:
        return ""
    return None


def encode_text(text: str, as_bytes: bool = False) -> Union[str, List[int]]:
    """Ledger representation of a string: native, or a vector<u8> when as_bytes."""
    if as_bytes:
        return list(text.encode('utf-8'))
    return text


def decode_int(value: Any) -> Optional[int]:
    """Decode an unsigned integer; u64 and wider arrive as decimal strings."""
    shape = _shape(value)
    if shape is ValueShape.INTEGER:
        return value if value >= 0 else None
    if shape is ValueShape.TEXT:
        text = value.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return None


def decode_id(value: Any) -> Optional[str]:
    """
    Decode an object id.

    Accepts a bare "0x.." string, a UID/ID mapping ({"id": "0x.."}), or
    either of those wrapped in "fields".
    """
    shape = _shape(value)
    if shape is ValueShape.TEXT:
        return value if value.startswith("0x") else None
    if shape is ValueShape.RECORD:
        inner = field(value, "id")
        if inner is ABSENT:
            inner = field(value, "bytes")
        if inner is ABSENT:
            return None
        return decode_id(inner)
    return None


def unwrap_vector(value: Any) -> Optional[list]:
    """
    Return the list inside a vector value.

    Tolerates a flat list, one "fields" wrapper around a "value" or
    "contents" list, or a bare {"value": [...]} mapping.
    """
    shape = _shape(value)
    if shape in (ValueShape.LIST, ValueShape.BYTES):
        return value
    if shape is ValueShape.RECORD:
        for name in ("value", "contents"):
            inner = field(value, name)
            if isinstance(inner, list):
                return inner
    return None


def decode_list(value: Any, item_decoder: Callable[[Any], Optional[T]]) -> Optional[List[T]]:
    """
    Decode a vector whose items all decode with item_decoder.

    Returns None if the value is not a vector or any item fails to decode.
    """
    items = unwrap_vector(value)
    if items is None:
        return None

    decoded = []
    for item in items:
        result = item_decoder(item)
        if result is None:
            return None
        decoded.append(result)
    return decoded


def require(value: Any, decoder: Callable[[Any], Optional[T]],
            error_factory: Callable[[], DropForgeError]) -> T:
    """
    Decode a required value, raising a structural error on absence or bad shape.

    Args:
        value: Raw ledger value (possibly ABSENT)
        decoder: One of the decode_* functions
        error_factory: Builds the error to raise, carrying field name and object id
    """
    if is_absent(value):
        raise error_factory()
    result = decoder(value)
    if result is None:
        raise error_factory()
    return result


def normalize_address(address: str) -> str:
    """Lower-case, 0x-prefixed, zero-padded 32-byte Sui address."""
    text = address.strip().lower()
    if text.startswith("0x"):
        text = text[2:]
    if not text or len(text) > 64 or any(c not in "0123456789abcdef" for c in text):
        raise ValueError(f"Invalid address: {address}")
    return "0x" + text.rjust(64, "0")
