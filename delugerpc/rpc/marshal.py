"""Value marshaling between native Python values and wire values.

The wire has no tag separating text from raw bytes: rencode hands every string
back as ``bytes``. Which fields hold text is declared by the reader, field by
field, through the ``decode_*`` helpers below.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from delugerpc.rpc.values import GenericValue, to_generic
from delugerpc.utils.exceptions import MarshalError, ShapeError

_KIND_NAMES = {
    int: "int",
    float: "float",
    bool: "bool",
    str: "text",
    bytes: "bytes",
    list: "list",
    dict: "dictionary",
    object: "any value",
}


def options_to_dictionary(options: Mapping[str, Any] | None) -> dict[str, GenericValue]:
    """Transcode an options mapping into a wire dictionary. Key order is not meaningful."""
    if options is None:
        return {}
    if not isinstance(options, Mapping):
        raise MarshalError(f"options must be a mapping, got {type(options).__name__}")
    out: dict[str, GenericValue] = {}
    for key, value in options.items():
        if not isinstance(key, str):
            raise MarshalError(f"option keys must be text, got {type(key).__name__}", path=repr(key))
        out[key] = to_generic(value, f"options[{key!r}]")
    return out


def strings_to_list(values: Iterable[str]) -> list[str]:
    """Transcode a sequence of text into a wire list, preserving order."""
    if isinstance(values, (str, bytes)):
        raise MarshalError("expected a sequence of text, got a single string")
    out: list[str] = []
    for idx, value in enumerate(values):
        if not isinstance(value, str):
            raise MarshalError(f"expected text, got {type(value).__name__}", path=f"[{idx}]")
        out.append(value)
    return out


def filter_to_dictionary(filter: Mapping[str, Iterable[str]] | None) -> dict[str, list[str]]:
    """Transcode a bulk-status filter (``{"id": [...], "state": [...]}``)."""
    if not filter:
        return {}
    return {str(key): strings_to_list(values) for key, values in filter.items()}


def decode_text(value: Any, field: str = "value") -> str:
    """Decode a field declared as text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ShapeError(field, "UTF-8 text", value) from exc
    raise ShapeError(field, "text", value)


def decode_optional_text(value: Any, field: str = "value") -> str:
    """Decode a text field the daemon may leave as a null placeholder.

    Absence (``None``) is a successful empty result, not an error.
    """
    if value is None:
        return ""
    return decode_text(value, field)


def decode_text_list(value: Any, field: str = "value") -> list[str]:
    if not isinstance(value, list):
        raise ShapeError(field, "list", value)
    return [decode_text(item, f"{field}[{idx}]") for idx, item in enumerate(value)]


def _decode_leaf(value: Any, field: str, binary_fields: frozenset[str]) -> Any:
    if isinstance(value, bytes):
        return decode_text(value, field)
    if isinstance(value, list):
        return [_decode_leaf(item, f"{field}[{idx}]", binary_fields) for idx, item in enumerate(value)]
    if isinstance(value, dict):
        return _decode_inner_mapping(value, field, binary_fields)
    return value


def _decode_inner_mapping(value: dict, field: str, binary_fields: frozenset[str]) -> dict[Any, Any]:
    # inner keys are not field names and need not be text
    out: dict[Any, Any] = {}
    for raw_key, item in value.items():
        key = decode_text(raw_key, f"{field} key") if isinstance(raw_key, bytes) else raw_key
        if key in binary_fields:
            out[key] = item
        else:
            out[key] = _decode_leaf(item, f"{field}.{key}", binary_fields)
    return out


def decode_mapping(
    value: Any,
    field: str = "value",
    binary_fields: Iterable[str] = (),
) -> dict[str, Any]:
    """Decode a dictionary keyed by text.

    Every ``bytes`` leaf, through nested lists and dictionaries, is decoded as
    text, except values stored under a key listed in ``binary_fields``. Only the
    top-level keys must be text; keys of nested dictionaries are decoded when
    they are bytes and kept as they are otherwise.
    """
    if not isinstance(value, dict):
        raise ShapeError(field, "dictionary", value)
    binary = frozenset(binary_fields)
    out: dict[str, Any] = {}
    for raw_key, item in value.items():
        key = decode_text(raw_key, f"{field} key")
        if key in binary:
            out[key] = item
        else:
            out[key] = _decode_leaf(item, f"{field}.{key}", binary)
    return out


def decode_nested_mapping(
    value: Any,
    field: str = "value",
    binary_fields: Iterable[str] = (),
) -> dict[str, dict[str, Any]]:
    """Decode a dictionary of dictionaries, as returned by bulk status queries."""
    if not isinstance(value, dict):
        raise ShapeError(field, "dictionary", value)
    binary = frozenset(binary_fields)
    out: dict[str, dict[str, Any]] = {}
    for raw_key, item in value.items():
        key = decode_text(raw_key, f"{field} key")
        out[key] = decode_mapping(item, f"{field}.{key}", binary)
    return out


def _matches(value: Any, kind: type) -> bool:
    if kind is object:
        return True
    if kind is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if kind is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, kind)


def scan(values: Any, *kinds: type, field: str = "result") -> tuple[Any, ...]:
    """Scan the leading elements of a result list into typed values.

    ``str`` is a declared text field: raw bytes are decoded. Extra trailing
    values are ignored; missing ones raise ``ShapeError``.
    """
    if not isinstance(values, list):
        raise ShapeError(field, "list", values)
    if len(values) < len(kinds):
        raise ShapeError(field, f"at least {len(kinds)} values", values)
    out: list[Any] = []
    for idx, (value, kind) in enumerate(zip(values, kinds)):
        name = f"{field}[{idx}]"
        if kind is str:
            out.append(decode_text(value, name))
            continue
        if kind not in _KIND_NAMES:
            raise MarshalError(f"unsupported scan target {kind!r}", path=name)
        if not _matches(value, kind):
            raise ShapeError(name, _KIND_NAMES[kind], value)
        out.append(float(value) if kind is float else value)
    return tuple(out)
