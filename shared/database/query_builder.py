"""Parameterized SQL composition.

QueryBuilder accumulates a statement and its positional parameters together.
Fragments are written with `{}` where a value goes; the builder swaps each
`{}` for the next asyncpg placeholder ($1, $2, ...) and appends the value in
the same step, so the placeholder count always equals len(params).

Column names, tables and ORDER BY clauses must come from code, never from
request input. Only values are bound.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidArgumentError, NoUpdatableFieldsError

MAX_PAGE_SIZE = 100

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Neutralize LIKE metacharacters (%, _ and the escape char itself)."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def like_pattern(term: str) -> str:
    """Substring pattern for ILIKE: escaped and wrapped in %...%."""
    return f"%{escape_like(term)}%"


def _check_int(name: str, value: Any) -> int:
    # bool is an int subclass; True must not become LIMIT 1
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(
            f"{name} must be an integer, got {value!r}",
            operation="paginate",
            details={name: repr(value)}
        )
    return value


class QueryBuilder:
    """Accumulates SQL text and bound parameters in lockstep.

    Usage:
        qb = QueryBuilder("SELECT id, name FROM users WHERE is_active = TRUE")
        qb.where_equals("role", "walker").where_contains("location", "Oslo")
        qb.order_by("created_at DESC").paginate(limit=20, offset=0)
        sql, params = qb.build()
    """

    def __init__(self, base_sql: str, *base_params: Any):
        self._parts: List[str] = [base_sql.strip()]
        self._params: List[Any] = []
        if base_params:
            # base_sql already carries $1..$n for its own values
            self._params.extend(base_params)

    @property
    def params(self) -> List[Any]:
        return list(self._params)

    def _bind(self, template: str, values: Sequence[Any]) -> str:
        if template.count("{}") != len(values):
            raise ValueError(
                f"Fragment {template!r} has {template.count('{}')} slots for {len(values)} values"
            )
        placeholders = []
        for value in values:
            self._params.append(value)
            placeholders.append(f"${len(self._params)}")
        return template.format(*placeholders)

    def append(self, template: str, *values: Any) -> "QueryBuilder":
        """Append a raw fragment, binding one value per `{}`."""
        self._parts.append(self._bind(template, values))
        return self

    def where(self, template: str, *values: Any) -> "QueryBuilder":
        """Append `AND <fragment>`, binding one value per `{}`."""
        return self.append(f"AND {template}", *values)

    def where_equals(self, column: str, value: Any) -> "QueryBuilder":
        if value is None:
            return self
        return self.where(f"{column} = {{}}", value)

    def where_contains(self, column: str, value: Optional[str]) -> "QueryBuilder":
        """Case-insensitive substring match with wildcards escaped."""
        if value is None:
            return self
        return self.where(f"{column} ILIKE {{}} ESCAPE '{LIKE_ESCAPE}'", like_pattern(value))

    def where_at_least(self, column: str, value: Any) -> "QueryBuilder":
        if value is None:
            return self
        return self.where(f"{column} >= {{}}", value)

    def where_at_most(self, column: str, value: Any) -> "QueryBuilder":
        if value is None:
            return self
        return self.where(f"{column} <= {{}}", value)

    def where_any_contains(self, columns: Sequence[str], term: str) -> "QueryBuilder":
        """Free-text disjunction: any of columns contains term.

        The pattern is computed once and bound once per column.
        """
        if not columns:
            raise ValueError("where_any_contains needs at least one column")
        pattern = like_pattern(term)
        clauses = " OR ".join(
            f"{column} ILIKE {{}} ESCAPE '{LIKE_ESCAPE}'" for column in columns
        )
        return self.where(f"({clauses})", *([pattern] * len(columns)))

    def order_by(self, clause: str) -> "QueryBuilder":
        self._parts.append(f"ORDER BY {clause}")
        return self

    def paginate(self, limit: Optional[int] = None, offset: Optional[int] = None) -> "QueryBuilder":
        """Bind LIMIT/OFFSET when present.

        Raises:
            InvalidArgumentError: limit outside [1, MAX_PAGE_SIZE], negative
                offset, or a non-integer value
        """
        if limit is not None:
            limit = _check_int("limit", limit)
            if not 1 <= limit <= MAX_PAGE_SIZE:
                raise InvalidArgumentError(
                    f"limit must be between 1 and {MAX_PAGE_SIZE}, got {limit}",
                    operation="paginate",
                    details={"limit": limit}
                )
            self.append("LIMIT {}", limit)
        if offset is not None:
            offset = _check_int("offset", offset)
            if offset < 0:
                raise InvalidArgumentError(
                    f"offset must be non-negative, got {offset}",
                    operation="paginate",
                    details={"offset": offset}
                )
            self.append("OFFSET {}", offset)
        return self

    def build(self) -> Tuple[str, List[Any]]:
        return " ".join(self._parts), list(self._params)


def build_update(
    table: str,
    payload: Dict[str, Any],
    allowed_fields: Iterable[str],
    key: Any,
    key_column: str = "id",
) -> Tuple[str, List[Any]]:
    """Build an UPDATE for the whitelisted subset of payload.

    Fields are emitted in whitelist order, `updated_at` is set by the server
    and the key is always the last parameter. Keys outside the whitelist are
    ignored. Explicit None values are kept and set the column to NULL.

    Raises:
        NoUpdatableFieldsError: payload has no whitelisted field
    """
    fields = [name for name in allowed_fields if name in payload]
    if not fields:
        raise NoUpdatableFieldsError(
            "No valid fields to update",
            entity=table,
            operation="update",
            details={"received": sorted(payload)}
        )

    qb = QueryBuilder(f"UPDATE {table} SET")
    assignments = ", ".join(f"{name} = {{}}" for name in fields)
    qb.append(f"{assignments}, updated_at = NOW()", *[payload[name] for name in fields])
    qb.append(f"WHERE {key_column} = {{}}", key)
    return qb.build()
