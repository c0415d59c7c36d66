"""
NocoDB query helpers.

Builds where/sort/pagination parameters in NocoDB v2 syntax and
converts payload keys between snake_case and camelCase.

Dependencies: None (pure domain layer)
System role: Query string construction for the NocoDB boundary
"""

import json
import math
import re
from datetime import date, datetime
from typing import Any

_VALID_OPS = {"eq", "neq", "null", "notnull", "gt", "gte", "lt", "lte", "like", "nlike"}
_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def build_where_clause(filters: list[dict[str, Any]]) -> str:
    """
    Build a NocoDB where clause.

    Each filter is a dict with ``field``, ``op`` and optional ``value``
    and ``logic`` keys. ``logic`` joins the filter to the next one.

    Example:
        build_where_clause([
            {"field": "status", "op": "eq", "value": "active"},
            {"field": "amount", "op": "gt", "value": 100},
        ])
        # "(status,eq,active)~and(amount,gt,100)"

    Raises:
        ValueError: If an operator is not supported by NocoDB
    """
    parts: list[str] = []
    for index, item in enumerate(filters):
        op = item["op"]
        if op not in _VALID_OPS:
            raise ValueError(f"Unsupported NocoDB operator: {op}")
        if "value" in item and item["value"] is not None:
            condition = f"({item['field']},{op},{item['value']})"
        else:
            condition = f"({item['field']},{op})"
        if index == 0:
            parts.append(condition)
        else:
            logic = filters[index - 1].get("logic", "and")
            parts.append(f"~{logic}{condition}")
    return "".join(parts)


def eq(field: str, value: Any) -> str:
    """Shorthand for a single equality clause."""
    return f"({field},eq,{value})"


def build_sort_param(sorts: list[tuple[str, str]]) -> str:
    """
    Build a NocoDB sort parameter from (field, direction) pairs.

    Example:
        build_sort_param([("created_at", "desc"), ("name", "asc")])
        # "-created_at,name"
    """
    return ",".join(("-" if direction == "desc" else "") + field for field, direction in sorts)


def build_query_params(
    page: int | None = None,
    page_size: int | None = None,
    filters: list[dict[str, Any]] | None = None,
    sorts: list[tuple[str, str]] | None = None,
    fields: list[str] | None = None,
) -> dict[str, Any]:
    """Build the full query dict for a NocoDB list request."""
    params: dict[str, Any] = {}
    if page is not None and page_size is not None:
        params["offset"] = (page - 1) * page_size
        params["limit"] = page_size
    if filters:
        params["where"] = build_where_clause(filters)
    if sorts:
        params["sort"] = build_sort_param(sorts)
    if fields:
        params["fields"] = ",".join(fields)
    return params


def sanitize_for_nocodb(data: dict[str, Any]) -> dict[str, Any]:
    """
    Prepare a record for a NocoDB write.

    Drops keys whose value is missing, formats dates as ISO strings and
    serializes nested dicts/lists to JSON text columns. Explicit ``None``
    values are not distinguishable from missing ones in Python, so both
    are dropped.
    """
    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (datetime, date)):
            sanitized[key] = value.isoformat()
        elif isinstance(value, (dict, list)):
            sanitized[key] = json.dumps(value, ensure_ascii=False)
        else:
            sanitized[key] = value
    return sanitized


def build_pagination_info(response: dict[str, Any], page: int, page_size: int) -> dict[str, Any]:
    """Derive pagination metadata from a NocoDB list response."""
    page_info = response.get("pageInfo") or {}
    total_rows = page_info.get("totalRows") or len(response.get("list", []))
    total_pages = math.ceil(total_rows / page_size) if page_size else 0
    return {
        "page": page,
        "pageSize": page_size,
        "totalRows": total_rows,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }


def is_valid_nocodb_id(record_id: Any) -> bool:
    """Check whether a value can be used as a NocoDB record id."""
    if isinstance(record_id, bool):
        return False
    if isinstance(record_id, int):
        return record_id > 0
    if isinstance(record_id, str):
        return bool(_ID_PATTERN.match(record_id))
    return False


def snake_to_camel(value: str) -> str:
    return re.sub(r"_([a-z])", lambda m: m.group(1).upper(), value)


def camel_to_snake(value: str) -> str:
    return re.sub(r"[A-Z]", lambda m: "_" + m.group(0).lower(), value)


def _transform_keys(obj: Any, convert) -> Any:
    if isinstance(obj, dict):
        return {convert(key): _transform_keys(value, convert) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_transform_keys(item, convert) for item in obj]
    return obj


def transform_keys_to_camel(obj: dict[str, Any]) -> dict[str, Any]:
    """Recursively convert dict keys from snake_case to camelCase."""
    return _transform_keys(obj, snake_to_camel)


def transform_keys_to_snake(obj: dict[str, Any]) -> dict[str, Any]:
    """Recursively convert dict keys from camelCase to snake_case."""
    return _transform_keys(obj, camel_to_snake)
