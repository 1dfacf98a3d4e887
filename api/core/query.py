"""
Query feature builder.

Turns a query-string parameter bag into a `QueryPlan`: equality/comparison
filters, keyword search, sorting, field projection and a page window. The
plan is only composed here; `core.crud.fetch_page` executes it.

Parameter conventions (all optional):
- `price[gte]=100`, `price[lt]=500`   comparison filters
- `city=Riyadh`                       equality (repeat the key for IN)
- `keyword=villa`                     case-insensitive search
- `sort=-created_at,title`            `-` means descending
- `fields=title,city` / `fields=-notes1`
- `page=2&limit=10`

Column names are checked against the collection's allow-list before they are
interpolated into SQL; values are always bound as parameters.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

RESERVED_KEYS = frozenset({"page", "sort", "limit", "fields", "keyword"})

OPERATORS = {
    "gte": ">=",
    "gt": ">",
    "lte": "<=",
    "lt": "<",
}

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_OPERATOR_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)\[(?P<op>[^\[\]]*)\]$")


class QueryError(ValueError):
    pass


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in {"true", "1", "yes"}:
        return True
    if value in {"false", "0", "no"}:
        return False
    raise ValueError(f"not a boolean: {raw!r}")


def _parse_timestamp(raw: str) -> datetime:
    value = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _int_parser(bits: int):
    low, high = -(2 ** (bits - 1)), 2 ** (bits - 1) - 1

    def parse(raw: str) -> int:
        value = int(raw)
        if not low <= value <= high:
            raise ValueError(f"out of range for a {bits}-bit integer: {raw!r}")
        return value

    return parse


def _parse_numeric(raw: str) -> Decimal:
    value = Decimal(raw)
    if not value.is_finite() or abs(value.adjusted()) > 1000:
        raise ValueError(f"not a storable number: {raw!r}")
    return value


def _parse_text(raw: str) -> str:
    if "\x00" in raw:
        raise ValueError("NUL characters are not allowed")
    return raw


_CASTS = {
    "int": _int_parser(64),
    "int4": _int_parser(32),
    "numeric": _parse_numeric,
    "text": _parse_text,
    "bool": _parse_bool,
    "timestamp": _parse_timestamp,
}


@dataclass(frozen=True)
class Collection:
    """
    A table the query builder may target.

    `columns` maps column name -> kind (int for bigint, int4, numeric, text,
    bool, timestamp, text[]). Hidden columns are left out of responses unless
    asked for.
    """

    table: str
    columns: Mapping[str, str]
    searchable: tuple[str, ...] = ()
    hidden: frozenset[str] = frozenset({"version"})
    default_sort: tuple[tuple[str, str], ...] = (("created_at", "desc"),)

    def has(self, name: str) -> bool:
        return name in self.columns

    def kind(self, name: str) -> str:
        return self.columns[name]

    @property
    def visible_columns(self) -> tuple[str, ...]:
        return tuple(name for name in self.columns if name not in self.hidden)


@dataclass(frozen=True)
class Condition:
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class SearchClause:
    keyword: str
    fields: tuple[str, ...]

    @property
    def pattern(self) -> str:
        escaped = (
            self.keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        )
        return f"%{escaped}%"


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int
    skip: int
    total_count: int
    total_pages: int
    next_page: int | None = None
    prev_page: int | None = None

    def as_dict(self) -> dict[str, int]:
        data = {
            "page": self.page,
            "limit": self.limit,
            "skip": self.skip,
            "total_count": self.total_count,
            "total_pages": self.total_pages,
            "next_page": self.next_page,
            "prev_page": self.prev_page,
        }
        return {k: v for k, v in data.items() if v is not None}


def _quote(name: str) -> str:
    return f'"{name}"'


@dataclass(frozen=True)
class QueryPlan:
    collection: Collection
    conditions: tuple[Condition, ...] = ()
    search: SearchClause | None = None
    sort: tuple[tuple[str, str], ...] = ()
    fields: tuple[str, ...] = ()
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    def where_sql(self, args: list[Any]) -> str:
        """
        Render the WHERE clause, appending bound values to `args`.
        """
        clauses: list[str] = []
        for cond in self.conditions:
            args.append(cond.value)
            column = _quote(cond.field)
            if cond.op == "in":
                clauses.append(f"{column} = ANY(${len(args)})")
            else:
                clauses.append(f"{column} {cond.op} ${len(args)}")

        if self.search is not None and self.search.fields:
            args.append(self.search.pattern)
            placeholder = f"${len(args)}"
            ors = " OR ".join(f"{_quote(name)} ILIKE {placeholder}" for name in self.search.fields)
            clauses.append(f"({ors})")

        if not clauses:
            return ""
        return "WHERE " + " AND ".join(clauses)

    def order_by_sql(self) -> str:
        parts = [f"{_quote(name)} {direction.upper()}" for name, direction in self.sort]
        if not any(name == "id" for name, _ in self.sort):
            parts.append('"id" DESC')
        return "ORDER BY " + ", ".join(parts)

    def count_sql(self) -> tuple[str, list[Any]]:
        args: list[Any] = []
        where = self.where_sql(args)
        sql = f"SELECT count(*) FROM {_quote(self.collection.table)} {where}".rstrip()
        return sql, args

    def select_sql(self, pagination: Pagination) -> tuple[str, list[Any]]:
        args: list[Any] = []
        where = self.where_sql(args)
        columns = ", ".join(_quote(name) for name in self.fields)
        args.extend([pagination.limit, pagination.skip])
        sql = " ".join(
            part
            for part in (
                f"SELECT {columns} FROM {_quote(self.collection.table)}",
                where,
                self.order_by_sql(),
                f"LIMIT ${len(args) - 1} OFFSET ${len(args)}",
            )
            if part
        )
        return sql, args


def paginate(plan: QueryPlan, total_count: int) -> Pagination:
    """
    Build pagination metadata for a plan given the filtered row count.

    `total_count` must be the count of the filtered set (before LIMIT/OFFSET),
    otherwise page numbers drift away from the rows returned.
    """
    total_count = max(0, int(total_count))
    total_pages = math.ceil(total_count / plan.limit)
    page = plan.page
    return Pagination(
        page=page,
        limit=plan.limit,
        skip=(page - 1) * plan.limit,
        total_count=total_count,
        total_pages=total_pages,
        next_page=page + 1 if page < total_pages else None,
        prev_page=page - 1 if page > 1 else None,
    )


def _normalize_params(
    raw: Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] | None,
) -> dict[str, list[str]]:
    if raw is None:
        return {}
    items = raw.items() if isinstance(raw, Mapping) else raw
    params: dict[str, list[str]] = {}
    for key, value in items:
        values = [value] if isinstance(value, str) else list(value)
        params.setdefault(str(key), []).extend(str(v) for v in values)
    return params


class QueryFeatures:
    """
    Chainable builder: `.filter().search().sort().limit_fields()`, then
    `.plan` for the composed QueryPlan and `.paginate(total)` once the
    filtered count is known.

    Page and limit are parsed up front so a bad value fails before any I/O.
    """

    def __init__(
        self,
        collection: Collection,
        params: Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] | None,
        *,
        reserved_keys: Iterable[str] = RESERVED_KEYS,
        searchable_fields: Sequence[str] | None = None,
        base_filter: Mapping[str, Any] | None = None,
    ) -> None:
        self.collection = collection
        self.params = _normalize_params(params)
        self.reserved_keys = frozenset(reserved_keys)
        self.searchable_fields = (
            tuple(searchable_fields) if searchable_fields is not None else collection.searchable
        )
        for name in self.searchable_fields:
            if not collection.has(name) or collection.kind(name) != "text":
                raise ValueError(f"{collection.table}.{name} is not a searchable text column.")

        self._conditions: list[Condition] = []
        for name, value in (base_filter or {}).items():
            self._require_column(name)
            self._conditions.append(Condition(name, "=", value))

        self._search: SearchClause | None = None
        self._sort: tuple[tuple[str, str], ...] = collection.default_sort
        self._fields: tuple[str, ...] = collection.visible_columns
        self.page = max(1, self._int_param("page", 1))
        self.limit = min(max(1, self._int_param("limit", DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)
        self.pagination: Pagination | None = None

    def _single(self, name: str) -> str | None:
        values = self.params.get(name)
        if not values:
            return None
        value = values[-1].strip()
        return value or None

    def _int_param(self, name: str, default: int) -> int:
        raw = self._single(name)
        if raw is None:
            return default
        try:
            return int(raw)
        except ValueError:
            raise QueryError(f"'{name}' must be an integer.") from None

    def _require_column(self, name: str) -> None:
        if not self.collection.has(name):
            raise QueryError(f"Unknown field '{name}'.")

    def _cast(self, name: str, raw: str) -> Any:
        kind = self.collection.kind(name)
        try:
            return _CASTS[kind](raw)
        except (ValueError, ArithmeticError):
            raise QueryError(f"Invalid value {raw!r} for field '{name}'.") from None

    def filter(self) -> "QueryFeatures":
        for key, values in self.params.items():
            if key in self.reserved_keys:
                continue

            match = _OPERATOR_KEY.match(key)
            if match is not None:
                name, op_name = match.group("field"), match.group("op")
                if op_name not in OPERATORS:
                    raise QueryError(f"Unsupported filter operator '{op_name}' in '{key}'.")
                op = OPERATORS[op_name]
            elif _FIELD_NAME.match(key):
                name, op = key, "="
            else:
                raise QueryError(f"Malformed filter key '{key}'.")

            self._require_column(name)
            kind = self.collection.kind(name)
            if kind not in _CASTS:
                raise QueryError(f"Field '{name}' cannot be used as a filter.")
            if kind == "bool" and op != "=":
                raise QueryError(f"Field '{name}' only supports equality filters.")

            if op == "=" and len(values) > 1:
                self._conditions.append(
                    Condition(name, "in", [self._cast(name, v) for v in values])
                )
                continue
            for raw in values:
                self._conditions.append(Condition(name, op, self._cast(name, raw)))
        return self

    def search(self) -> "QueryFeatures":
        keyword = self._single("keyword")
        if keyword is not None and "\x00" in keyword:
            raise QueryError("Invalid value for 'keyword'.")
        if keyword is not None and self.searchable_fields:
            self._search = SearchClause(keyword=keyword, fields=self.searchable_fields)
        return self

    def sort(self) -> "QueryFeatures":
        raw = self._single("sort")
        if raw is None:
            return self

        parsed: list[tuple[str, str]] = []
        for token in raw.split(","):
            token = token.strip()
            if not token:
                continue
            direction = "desc" if token.startswith("-") else "asc"
            name = token[1:] if token.startswith("-") else token
            self._require_column(name)
            parsed.append((name, direction))

        if parsed:
            self._sort = tuple(parsed)
        return self

    def limit_fields(self) -> "QueryFeatures":
        raw = self._single("fields")
        if raw is None:
            return self

        tokens = [t.strip() for t in raw.split(",") if t.strip()]
        if not tokens:
            return self
        negated = [t for t in tokens if t.startswith("-")]
        if negated and len(negated) != len(tokens):
            raise QueryError("Cannot mix included and excluded fields.")
        excluded = {t[1:] for t in negated}

        names = excluded or set(tokens)
        for name in names:
            self._require_column(name)

        if excluded:
            self._fields = tuple(
                name
                for name in self.collection.visible_columns
                if name == "id" or name not in excluded
            )
        else:
            ordered = [name for name in self.collection.columns if name in names and name != "id"]
            self._fields = ("id", *ordered)
        return self

    @property
    def plan(self) -> QueryPlan:
        return QueryPlan(
            collection=self.collection,
            conditions=tuple(self._conditions),
            search=self._search,
            sort=self._sort,
            fields=self._fields,
            page=self.page,
            limit=self.limit,
        )

    def paginate(self, total_count: int) -> "QueryFeatures":
        self.pagination = paginate(self.plan, total_count)
        return self


def build_query_plan(
    raw_params: Mapping[str, str | Sequence[str]] | Iterable[tuple[str, str]] | None,
    collection: Collection,
    *,
    reserved_keys: Iterable[str] = RESERVED_KEYS,
    searchable_fields: Sequence[str] | None = None,
    base_filter: Mapping[str, Any] | None = None,
) -> QueryPlan:
    features = (
        QueryFeatures(
            collection,
            raw_params,
            reserved_keys=reserved_keys,
            searchable_fields=searchable_fields,
            base_filter=base_filter,
        )
        .filter()
        .search()
        .sort()
        .limit_fields()
    )
    return features.plan
