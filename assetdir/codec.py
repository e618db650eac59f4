# assetdir/codec.py
"""
YAML decoder/encoder boundary.

Records are YAML mappings. A target type is either a dataclass (fields are
filled from keys of the same name, nested dataclasses and enums included) or
any class exposing ``from_dict``/``to_dict`` like the records elsewhere in
this package.

Unknown keys are ignored. In lenient mode a missing field without a default
becomes None; in strict mode it is a DecodeError, as is an explicit null for
a field that cannot hold one.

Scalars are checked against ``str``/``int``/``float``/``bool`` hints in both
modes; an unquoted number in a ``str`` field is read as text.
"""

import dataclasses
import enum
import typing
from pathlib import Path
from typing import Any, Dict, Type, TypeVar

import yaml

from .errors import DecodeError, EncodeError

T = TypeVar("T")

_NONE_TYPE = type(None)


def _is_optional(hint: Any) -> bool:
    return typing.get_origin(hint) is typing.Union and _NONE_TYPE in typing.get_args(hint)


def _strip_optional(hint: Any) -> Any:
    if _is_optional(hint):
        args = [a for a in typing.get_args(hint) if a is not _NONE_TYPE]
        if len(args) == 1:
            return args[0]
    return hint


def _type_hints(cls: type) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError):
        # Unresolvable forward references; fall back to raw annotations
        return {f.name: f.type for f in dataclasses.fields(cls)}


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


class YamlCodec:
    """
    Converts between file bytes and typed records.

    Args:
        strict: Treat missing or null fields as decode failures
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def decode(self, data: bytes, target: Type[T]) -> T:
        """
        Decode YAML bytes into an instance of ``target``.

        Raises:
            DecodeError: Invalid YAML, non-mapping document, or fields that
                do not fit the target type
        """
        try:
            raw = yaml.safe_load(data)
        except yaml.YAMLError as e:
            raise DecodeError(f"Invalid YAML: {e}") from e
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise DecodeError(f"Expected a mapping, got {type(raw).__name__}")
        return self.from_mapping(raw, target)

    def from_mapping(self, raw: Dict[str, Any], target: Type[T]) -> T:
        """Build ``target`` from an already parsed mapping."""
        from_dict = getattr(target, "from_dict", None)
        if callable(from_dict):
            try:
                return from_dict(raw)
            except (KeyError, TypeError, ValueError) as e:
                raise DecodeError(f"{target.__name__}.from_dict failed: {e!r}") from e
        if dataclasses.is_dataclass(target):
            return self._build_dataclass(raw, target)
        raise DecodeError(f"Cannot decode into {target!r}: not a dataclass and no from_dict()")

    def _build_dataclass(self, raw: Dict[str, Any], target: type) -> Any:
        hints = _type_hints(target)
        kwargs: Dict[str, Any] = {}
        for f in dataclasses.fields(target):
            if not f.init:
                continue
            hint = hints.get(f.name, Any)
            if f.name not in raw:
                if _has_default(f):
                    continue
                if self.strict:
                    raise DecodeError(f"{target.__name__}: missing required field '{f.name}'")
                kwargs[f.name] = None
                continue
            value = raw[f.name]
            if value is None:
                nullable = _is_optional(hint) or f.default is None
                if self.strict and not nullable:
                    raise DecodeError(f"{target.__name__}: field '{f.name}' is null")
                kwargs[f.name] = None
                continue
            kwargs[f.name] = self._convert(value, hint, f"{target.__name__}.{f.name}")
        try:
            return target(**kwargs)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Cannot construct {target.__name__}: {e}") from e

    def _convert(self, value: Any, hint: Any, where: str) -> Any:
        hint = _strip_optional(hint)
        origin = typing.get_origin(hint)

        if isinstance(hint, type) and dataclasses.is_dataclass(hint):
            if not isinstance(value, dict):
                raise DecodeError(f"{where}: expected a mapping for {hint.__name__}")
            return self._build_dataclass(value, hint)

        if isinstance(hint, type) and issubclass(hint, enum.Enum):
            if isinstance(value, hint):
                return value
            try:
                return hint(value)
            except ValueError as e:
                raise DecodeError(f"{where}: {e}") from e

        if hint is Path:
            return Path(value)

        if hint in (str, int, float, bool):
            return self._convert_scalar(value, hint, where)

        if origin is list and isinstance(value, list):
            args = typing.get_args(hint)
            if args:
                return [self._convert(v, args[0], where) for v in value]
            return list(value)

        if origin is dict and isinstance(value, dict):
            args = typing.get_args(hint)
            if len(args) == 2:
                return {k: self._convert(v, args[1], where) for k, v in value.items()}
            return dict(value)

        return value

    @staticmethod
    def _convert_scalar(value: Any, hint: type, where: str) -> Any:
        """Coerce a YAML scalar to ``hint``; numbers become text for ``str`` fields."""
        if hint is str:
            if isinstance(value, str):
                return value
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return str(value)
        elif hint is bool:
            if isinstance(value, bool):
                return value
        elif hint is int:
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            if isinstance(value, float) and value.is_integer():
                return int(value)
            if isinstance(value, str):
                try:
                    return int(value.strip())
                except ValueError:
                    pass
        elif hint is float:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return float(value)
            if isinstance(value, str):
                try:
                    return float(value.strip())
                except ValueError:
                    pass
        raise DecodeError(f"{where}: expected {hint.__name__}, got {value!r}")

    def encode(self, value: Any) -> bytes:
        """
        Encode a record as YAML bytes.

        Raises:
            EncodeError: The value (or something inside it) has no YAML form
        """
        try:
            data = self.to_plain(value)
            text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        except yaml.YAMLError as e:
            raise EncodeError(f"Cannot encode {type(value).__name__}: {e}") from e
        return text.encode("utf-8")

    def to_plain(self, value: Any) -> Any:
        """Reduce a record to dicts, lists and scalars."""
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict) and not isinstance(value, type):
            try:
                data = to_dict()
            except Exception as e:
                raise EncodeError(f"{type(value).__name__}.to_dict failed: {e!r}") from e
            return self.to_plain(data)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {
                f.name: self.to_plain(getattr(value, f.name))
                for f in dataclasses.fields(value)
                if f.init
            }
        if isinstance(value, enum.Enum):
            return value.value
        if isinstance(value, Path):
            return str(value)
        if isinstance(value, dict):
            return {str(k): self.to_plain(v) for k, v in value.items()}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self.to_plain(v) for v in value]
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        raise EncodeError(f"Cannot encode value of type {type(value).__name__}")


def decode(data: bytes, target: Type[T], strict: bool = False) -> T:
    """Decode with a one-off codec."""
    return YamlCodec(strict=strict).decode(data, target)


def encode(value: Any) -> bytes:
    """Encode with a one-off codec."""
    return YamlCodec().encode(value)
