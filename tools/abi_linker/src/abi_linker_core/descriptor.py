from __future__ import annotations

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema

from .common import load_json_object, render_json, write_text_atomic
from .errors import InputParseError, SerializationError

TOOL_NAME = "abi_linker"
TOOL_VERSION = "1.0.0"

# Link order inside one translation unit.
TYPE_CATEGORIES = (
    "record_types",
    "enum_types",
    "builtin_types",
    "pointer_types",
    "rvalue_reference_types",
    "lvalue_reference_types",
    "array_types",
    "qualified_types",
)
FUNCTION_CATEGORY = "functions"
GLOBAL_VAR_CATEGORY = "global_vars"
DECL_CATEGORIES = TYPE_CATEGORIES + (FUNCTION_CATEGORY, GLOBAL_VAR_CATEGORY)

ELF_FUNCTION_CATEGORY = "elf_functions"
ELF_OBJECT_CATEGORY = "elf_objects"
OUTPUT_CATEGORIES = DECL_CATEGORIES + (ELF_FUNCTION_CATEGORY, ELF_OBJECT_CATEGORY)

_VALIDATORS: dict[str, Any] = {}


def get_schema_path() -> Path:
    return Path(__file__).resolve().parent / "schemas" / "descriptor.schema.json"


def _descriptor_validator() -> Any:
    validator = _VALIDATORS.get("descriptor")
    if validator is None:
        schema = load_json_object(get_schema_path())
        jsonschema.Draft7Validator.check_schema(schema)
        validator = jsonschema.Draft7Validator(schema)
        _VALIDATORS["descriptor"] = validator
    return validator


def validate_descriptor_payload(payload: dict[str, Any], label: str) -> None:
    error = jsonschema.exceptions.best_match(_descriptor_validator().iter_errors(payload))
    if error is None:
        return
    location = "/".join(str(part) for part in error.absolute_path) or "<root>"
    raise InputParseError(f"{label} failed JSON schema validation at '{location}': {error.message}")


@dataclass(frozen=True)
class AbiEntity:
    """One declared type, function or global variable.

    The payload is kept exactly as it was read; only the linkage key and the
    source file are interpreted, and where they live depends on whether the
    entity is a type (nested under ``type_info``) or a declaration.
    """

    category: str
    payload: dict[str, Any]

    def _key_fields(self) -> dict[str, Any]:
        if self.category in TYPE_CATEGORIES:
            return self.payload.get("type_info", {})
        return self.payload

    @property
    def linkage_key(self) -> str:
        return str(self._key_fields().get("linker_set_key", ""))

    @property
    def source_file(self) -> str:
        return str(self._key_fields().get("source_file", ""))


@dataclass
class TranslationUnitDescriptor:
    path: str
    entities: dict[str, list[AbiEntity]]

    def category(self, name: str) -> list[AbiEntity]:
        return self.entities.get(name, [])


@dataclass
class LinkedDescriptor:
    categories: dict[str, list[dict[str, Any]]] = field(
        default_factory=lambda: {name: [] for name in OUTPUT_CATEGORIES}
    )

    def append(self, category: str, entity: AbiEntity) -> None:
        self.categories[category].append(copy.deepcopy(entity.payload))

    def add_symbol(self, category: str, name: str) -> None:
        self.categories[category].append({"name": name})

    def keys(self, category: str) -> list[str]:
        entries = self.categories[category]
        if category in (ELF_FUNCTION_CATEGORY, ELF_OBJECT_CATEGORY):
            return [entry["name"] for entry in entries]
        return [AbiEntity(category, entry).linkage_key for entry in entries]

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "tool": {
                "name": TOOL_NAME,
                "version": TOOL_VERSION,
            },
        }
        for name in OUTPUT_CATEGORIES:
            payload[name] = self.categories[name]
        return payload


def descriptor_from_payload(payload: dict[str, Any], label: str) -> TranslationUnitDescriptor:
    validate_descriptor_payload(payload, label)
    entities: dict[str, list[AbiEntity]] = {}
    for name in DECL_CATEGORIES:
        entities[name] = [AbiEntity(name, item) for item in payload.get(name, [])]
    return TranslationUnitDescriptor(path=label, entities=entities)


def parse_descriptor(path: Path) -> TranslationUnitDescriptor:
    payload = load_json_object(path)
    return descriptor_from_payload(payload, str(path))


def serialize_descriptor(linked: LinkedDescriptor, path: Path) -> None:
    try:
        content = render_json(linked.as_dict())
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Unable to serialize linked descriptor: {exc}") from exc
    write_text_atomic(path, content)
