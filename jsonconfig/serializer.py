"""JSON codec for typed config values.

Validation and dumping go through pydantic ``TypeAdapter`` so the same
serializer handles ``BaseModel`` subclasses, standard dataclasses and
``TypedDict`` shapes. Unknown keys in the payload are ignored.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Generic, Protocol, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from .defaults import JSON_INDENT
from .errors import SerializationError

T = TypeVar("T")
S = TypeVar("S")


class Serializer(Protocol[T]):
    """Codec operations required by ConfigStore."""

    def encode(self, value: T) -> str:
        ...

    def decode(self, text: str) -> T:
        ...

    def to_tree(self, value: T) -> Dict[str, Any]:
        ...

    def decode_section(self, node: Any, section_type: Type[S]) -> S:
        ...


class JsonSerializer(Generic[T]):
    """Encode/decode ``config_type`` values as pretty-printed JSON objects."""

    def __init__(self, config_type: Type[T], *, indent: int = JSON_INDENT) -> None:
        self._adapter: TypeAdapter[T] = TypeAdapter(config_type)
        self._indent = indent
        self._section_adapters: Dict[Any, TypeAdapter[Any]] = {}

    def encode(self, value: T) -> str:
        return json.dumps(self.to_tree(value), ensure_ascii=False, indent=self._indent)

    def decode(self, text: str) -> T:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"Invalid JSON: {exc}") from exc
        if payload is None:
            raise SerializationError("JSON payload decoded to null.")
        try:
            return self._adapter.validate_python(payload)
        except ValidationError as exc:
            raise SerializationError(f"Payload does not match the config type: {exc}") from exc

    def to_tree(self, value: T) -> Dict[str, Any]:
        tree = self._adapter.dump_python(value, mode="json", by_alias=True)
        if not isinstance(tree, dict):
            raise SerializationError(
                f"Config value must encode as a JSON object, got {type(tree).__name__}."
            )
        return tree

    def decode_section(self, node: Any, section_type: Type[S]) -> S:
        adapter = self._section_adapters.get(section_type)
        if adapter is None:
            adapter = TypeAdapter(section_type)
            self._section_adapters[section_type] = adapter
        try:
            return adapter.validate_python(node)
        except ValidationError as exc:
            raise SerializationError(str(exc)) from exc
