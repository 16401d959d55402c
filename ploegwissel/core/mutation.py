from __future__ import annotations

from typing import Any, Sequence, Tuple, Union

from .document import Document, SECTION_TYPES, TriState
from .errors import InvalidPath, InvalidValue, UnknownKey
from .fields import Field, FieldKind, MapField, clamp_text


PathLike = Union[Field, MapField, str, Sequence[str]]


def _segments(path: PathLike) -> Tuple[str, ...]:
    if isinstance(path, (Field, MapField)):
        return tuple(path.path.split("."))
    parts = tuple(path.split(".")) if isinstance(path, str) else tuple(str(p) for p in path)
    if not parts or any(not p for p in parts):
        raise InvalidPath(path, "empty segment")
    return parts


def _resolve_map(parts: Tuple[str, ...], original: PathLike) -> MapField:
    if parts[0] not in SECTION_TYPES:
        raise InvalidPath(original, f"unknown section '{parts[0]}'")
    map_field = MapField.lookup(".".join(parts))
    if map_field is None:
        raise InvalidPath(original, f"'{'.'.join(parts)}' is not a mapping field")
    return map_field


def resolve(path: PathLike) -> Tuple[Field | MapField, str | None]:
    """Return the addressed leaf and, for mapping entries, the key."""
    if isinstance(path, Field):
        return path, None
    parts = _segments(path)
    if parts[0] not in SECTION_TYPES:
        raise InvalidPath(path, f"unknown section '{parts[0]}'")
    if len(parts) == 2:
        target = Field.lookup(".".join(parts))
        if target is not None:
            return target, None
        if MapField.lookup(".".join(parts)) is not None:
            raise InvalidPath(path, "mapping fields change one key at a time")
        raise InvalidPath(path, f"unknown field '{parts[1]}'")
    if len(parts) == 3:
        return _resolve_map(parts[:2], path), parts[2]
    raise InvalidPath(path, "expected section.field or section.mapping.key")


def _coerce(target: Field, value: Any) -> Any:
    if target.kind is FieldKind.TRI:
        try:
            return TriState.coerce(value)
        except ValueError as exc:
            raise InvalidValue(target.path, value, str(exc)) from exc
    if target.kind is FieldKind.BOOL:
        if not isinstance(value, bool):
            raise InvalidValue(target.path, value, "expected a boolean")
        return value
    if not isinstance(value, str):
        raise InvalidValue(target.path, value, "expected a string")
    value = clamp_text(value, target.max_length)
    if target.choices is not None and value not in target.choices:
        raise InvalidValue(target.path, value, f"expected one of {', '.join(target.choices)}")
    return value


def get_value(doc: Document, path: PathLike) -> Any:
    target, key = resolve(path)
    if key is None:
        return target.get(doc)
    mapping = target.get(doc)
    if key not in mapping:
        raise UnknownKey(target.path, key)
    return mapping[key]


def set_field(doc: Document, path: PathLike, value: Any) -> Document:
    """Return a copy of ``doc`` with the leaf at ``path`` replaced by ``value``.

    Text is truncated to the field's cap. ``doc`` itself is never touched and
    the result shares no mutable state with it.
    """
    target, key = resolve(path)
    if key is not None:
        mapping = target.get(doc)
        if key not in mapping:
            raise UnknownKey(target.path, key)
        if not isinstance(value, bool):
            raise InvalidValue(f"{target.path}.{key}", value, "expected a boolean")
        next_doc = doc.copy()
        target.get(next_doc)[key] = value
        return next_doc
    coerced = _coerce(target, value)
    next_doc = doc.copy()
    setattr(getattr(next_doc, target.section), target.attr, coerced)
    return next_doc


def toggle_map_entry(doc: Document, path: MapField | str | Sequence[str], key: str) -> Document:
    if isinstance(path, MapField):
        map_field = path
    else:
        map_field = _resolve_map(_segments(path), path)
    if key not in map_field.get(doc):
        raise UnknownKey(map_field.path, key)
    next_doc = doc.copy()
    mapping = map_field.get(next_doc)
    mapping[key] = not mapping[key]
    return next_doc
