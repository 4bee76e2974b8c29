"""Generic value model shared by the codec and the marshaler.

The wire has a single, untyped container model: ``int``, ``float``, ``bool``,
``str``, ``bytes``, ``None``, ``list`` and insertion-ordered ``dict``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from delugerpc.utils.exceptions import MarshalError

GenericScalar = Union[int, float, bool, str, bytes, None]
GenericValue = Union[GenericScalar, list["GenericValue"], dict["GenericValue", "GenericValue"]]

_SCALARS = (bool, int, float, str, bytes)


def _plain_scalar(value: Any) -> GenericScalar:
    # rencode only handles the exact builtin types, not IntEnum/StrEnum and friends
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value if type(value) is int else int(value)
    if isinstance(value, float):
        return value if type(value) is float else float(value)
    if isinstance(value, str):
        return value if type(value) is str else str.__str__(value)
    return value if type(value) is bytes else bytes(value)


def to_generic(value: Any, path: str = "$") -> GenericValue:
    """Normalize a native value into a wire value.

    Tuples become lists, any ``Mapping`` becomes a ``dict``, ``bytearray``
    becomes ``bytes`` and subclasses of the scalar types (``IntEnum``,
    ``StrEnum``) become the plain builtin. Unsupported types raise
    ``MarshalError`` with the path of the offending element.
    """
    if value is None or isinstance(value, (_SCALARS, bytearray)):
        return _plain_scalar(value)
    if isinstance(value, (list, tuple)):
        return [to_generic(item, f"{path}[{idx}]") for idx, item in enumerate(value)]
    if isinstance(value, Mapping):
        out: dict[GenericValue, GenericValue] = {}
        for key, item in value.items():
            if not (key is None or isinstance(key, _SCALARS)):
                raise MarshalError(f"unsupported dictionary key type {type(key).__name__}", path=path)
            out[_plain_scalar(key)] = to_generic(item, f"{path}[{key!r}]")
        return out
    raise MarshalError(f"unsupported value type {type(value).__name__}", path=path)


def from_wire(value: Any) -> GenericValue:
    """Normalize a freshly decoded value: rencode hands lists back as tuples."""
    if isinstance(value, (list, tuple)):
        return [from_wire(item) for item in value]
    if isinstance(value, dict):
        return {key: from_wire(item) for key, item in value.items()}
    return value


def type_summary(values: list[Any]) -> str:
    """Render ``[int, bytes, ...]`` for debug logging of result lists."""
    return ", ".join(type(v).__name__ for v in values)
