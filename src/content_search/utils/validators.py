"""Input validation utilities."""

from dataclasses import asdict
from typing import Any, Dict, List, Mapping, Optional, Union

import pydantic

from ..models.content import ContentRecord, ContentType
from ..models.query import SearchOptions, SearchOptionsModel
from ..core.exceptions import ValidationError

OptionsLike = Union[SearchOptions, Mapping[str, Any], None]


_FIELD_NAMES = {
    field_info.alias: name
    for name, field_info in SearchOptionsModel.model_fields.items()
    if field_info.alias
}


def _field_names(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Translate camelCase aliases into field names."""
    return {_FIELD_NAMES.get(key, key): value for key, value in data.items()}


def resolve_options(
    options: OptionsLike = None,
    defaults: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None
) -> SearchOptions:
    """
    Resolve caller-supplied options into a validated SearchOptions.

    Accepts a SearchOptions instance, a mapping using either snake_case or
    camelCase keys, or None. Missing fields come from defaults, then from
    the SearchOptions defaults.

    Args:
        options: Options to resolve
        defaults: Fallback values for fields options leave out
        overrides: Values replacing those of options

    Returns:
        Validated search options

    Raises:
        ValidationError: If options are of the wrong type or out of range
    """
    try:
        if isinstance(options, SearchOptions):
            if not overrides:
                return options
            data = asdict(options)
        elif options is None:
            data = {}
        elif isinstance(options, Mapping):
            data = _field_names(options)
        else:
            raise ValidationError(f"Invalid options type: {type(options).__name__}")

        merged = _field_names(defaults or {})
        merged.update(data)
        merged.update(_field_names(overrides or {}))
        return SearchOptionsModel.model_validate(merged).to_options()

    except ValidationError:
        raise
    except (pydantic.ValidationError, ValueError, TypeError) as e:
        raise ValidationError(f"Invalid search options: {str(e)}")


def validate_query_text(query: Any) -> str:
    """
    Validate query text.

    Raises:
        ValidationError: If query is not a string
    """
    if query is None:
        return ""
    if not isinstance(query, str):
        raise ValidationError(f"Query must be a string, got {type(query).__name__}")
    return query


def validate_content_type(content_type: Any) -> Optional[ContentType]:
    """Coerce a content type name into ContentType."""
    if content_type is None or isinstance(content_type, ContentType):
        return content_type
    try:
        return ContentType(content_type)
    except ValueError:
        raise ValidationError(f"Unknown content type: {content_type}")


def validate_records_batch(records: List[ContentRecord]) -> None:
    """
    Validate a batch of content records.

    Args:
        records: Records to validate

    Raises:
        ValidationError: If any item is not a record or an id repeats within a type
    """
    seen = set()
    for record in records:
        if not isinstance(record, ContentRecord):
            raise ValidationError(f"Invalid content record: {record!r}")

        key = (record.type, record.id)
        if key in seen:
            raise ValidationError(f"Duplicate content ID {record.id} for type {record.type.value}")
        seen.add(key)
