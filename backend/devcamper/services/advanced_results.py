"""
DevCamper API — Query Translator ("advanced results")
======================================================

What:  Turns a list endpoint's query string into a filtered, sorted, paginated
       and field-selected query, runs it, and leaves the response envelope on
       `request.state.advanced_results` for the route to return verbatim.

Query string grammar:
    select=a,b,c              keep only these output fields (id always kept)
    sort=a,-b                 a ascending, then b descending
    page=2&limit=5            1-indexed page, page size (defaults 1 and 25)
    field=value               equality
    field[op]=value           op ∈ gt, gte, lt, lte, in (in takes a,b,c)

Only names listed in a resource's `ResourceFields` are accepted; anything
else is a BadRequestError, so a caller can never filter on a column the
resource does not expose. Values are converted to the column's Python type
before they reach SQLAlchemy.

Output envelope:
    {"success": true, "count": 5, "pagination": {"prev": {...}, "next": {...}},
     "data": [...]}
The unpaginated total goes in the `X-Total-Count` response header.
"""

import logging
import operator
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from fastapi import Depends, Request, Response
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.database import get_db_session
from devcamper.exceptions import BadRequestError

logger = logging.getLogger(__name__)

RESERVED_PARAMS = ("select", "sort", "page", "limit")
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25

OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "eq": operator.eq,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
    "in": lambda column, values: column.in_(values),
}

_FILTER_KEY = re.compile(r"^([A-Za-z_][\w.]*)(?:\[(\w*)\])?$")
_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass(frozen=True)
class ResourceFields:
    """
    Allow-list for one resource.

    columns:     public (camelCase) name → mapped column; filterable and sortable
    selectable:  output keys a caller may name in `select`
    default_sort: used when no `sort` parameter is given
    """

    columns: Mapping[str, Any]
    selectable: Sequence[str]
    default_sort: Tuple[Tuple[str, bool], ...] = (("createdAt", True),)


@dataclass(frozen=True)
class Condition:
    field: str
    op: str
    value: Any


@dataclass
class QuerySpec:
    conditions: List[Condition] = field(default_factory=list)
    select: Optional[List[str]] = None
    # (public field name, descending)
    sort: List[Tuple[str, bool]] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Eager:
    """A relationship loaded with every row and rendered under `key`."""

    key: str
    relationship: Any
    serialize: Callable[[Any], Any]


# ── Parsing (pure) ────────────────────────────────────────────────────────


def _positive_int(name: str, raw: str) -> int:
    try:
        value = int(raw)
    except ValueError:
        raise BadRequestError(message=f"'{name}' must be a positive integer", field=name)
    if value < 1:
        raise BadRequestError(message=f"'{name}' must be a positive integer", field=name)
    return value


def _coerce(name: str, column: Any, raw: str) -> Any:
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.strip().lower()
            if lowered in _TRUE:
                return True
            if lowered in _FALSE:
                return False
            raise ValueError(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw)
        if python_type is uuid.UUID:
            return uuid.UUID(raw)
        return python_type(raw)
    except (TypeError, ValueError):
        raise BadRequestError(
            message=f"Invalid value '{raw}' for field '{name}'",
            field=name,
        )


def _split(raw: str) -> List[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def parse_query_params(params: Mapping[str, str], fields: ResourceFields) -> QuerySpec:
    """
    Validate a query string against a resource's allow-list.

    `params` is any mapping of parameter name to a single string value;
    for a repeated parameter the caller passes the last occurrence.

    Raises:
        BadRequestError: unknown field or operator, unconvertible value,
                         non-positive page/limit
    """
    query = QuerySpec()

    for key, raw in params.items():
        if key in RESERVED_PARAMS:
            continue

        match = _FILTER_KEY.match(key)
        if match is None:
            raise BadRequestError(message=f"Invalid query parameter '{key}'", field=key)
        name, suffix = match.group(1), match.group(2)
        if suffix is None:
            op = "eq"
        elif suffix in OPERATORS and suffix != "eq":
            op = suffix
        else:
            raise BadRequestError(message=f"Unknown operator '{suffix}' on '{name}'", field=key)
        if name not in fields.columns:
            raise BadRequestError(message=f"Cannot filter on field '{name}'", field=name)

        column = fields.columns[name]
        if op == "in":
            value: Any = [_coerce(name, column, part) for part in _split(raw)]
        else:
            value = _coerce(name, column, raw)
        query.conditions.append(Condition(field=name, op=op, value=value))

    if "select" in params:
        selected = _split(params["select"])
        unknown = [name for name in selected if name not in fields.selectable]
        if unknown:
            raise BadRequestError(
                message=f"Cannot select field(s): {', '.join(unknown)}", field="select"
            )
        query.select = selected

    if "sort" in params:
        for token in _split(params["sort"]):
            descending = token.startswith("-")
            name = token.lstrip("-")
            if name not in fields.columns:
                raise BadRequestError(message=f"Cannot sort on field '{name}'", field="sort")
            query.sort.append((name, descending))
    if not query.sort:
        query.sort = list(fields.default_sort)

    if "page" in params:
        query.page = _positive_int("page", params["page"])
    if "limit" in params:
        query.limit = _positive_int("limit", params["limit"])

    return query


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Dict[str, int]]:
    start = (page - 1) * limit
    end = page * limit
    pagination: Dict[str, Dict[str, int]] = {}
    if end < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


def project(item: Dict[str, Any], selected: Optional[Sequence[str]]) -> Dict[str, Any]:
    if selected is None:
        return item
    keys = ["id"] + [name for name in selected if name != "id"]
    return {key: item[key] for key in keys if key in item}


# ── Execution ─────────────────────────────────────────────────────────────


async def run_query(
    db: AsyncSession,
    model: Any,
    fields: ResourceFields,
    query: QuerySpec,
    serializer: Callable[[Any], Dict[str, Any]],
    eager: Sequence[Eager] = (),
    scope: Sequence[Any] = (),
) -> Tuple[Dict[str, Any], int]:
    """
    Execute a parsed QuerySpec.

    Args:
        scope: extra SQL criteria fixed by the route (e.g. the parent bootcamp)

    Returns:
        (response envelope, total matching rows)
    """
    criteria = list(scope)
    for condition in query.conditions:
        column = fields.columns[condition.field]
        criteria.append(OPERATORS[condition.op](column, condition.value))

    total = await db.scalar(select(func.count()).select_from(model).where(*criteria)) or 0

    order_by = []
    for name, descending in query.sort:
        column = fields.columns[name]
        order_by.append(column.desc() if descending else column.asc())
    # Stable ordering across pages when sort keys tie
    order_by.append(model.id.asc())

    stmt = (
        select(model)
        .where(*criteria)
        .order_by(*order_by)
        .offset(query.skip)
        .limit(query.limit)
    )
    for relation in eager:
        stmt = stmt.options(selectinload(relation.relationship))

    rows = (await db.scalars(stmt)).all()

    data = []
    for row in rows:
        item = project(serializer(row), query.select)
        for relation in eager:
            item[relation.key] = relation.serialize(getattr(row, relation.relationship.key))
        data.append(item)

    envelope = {
        "success": True,
        "count": len(data),
        "pagination": build_pagination(query.page, query.limit, total),
        "data": data,
    }
    return envelope, total


class AdvancedResults:
    """
    FastAPI dependency wrapping parse + execute for one resource.

    Usage:
        bootcamp_results = AdvancedResults(Bootcamp, BOOTCAMP_FIELDS, serializer, eager=[...])

        @router.get("/")
        async def list_bootcamps(request: Request, _=Depends(bootcamp_results)):
            return request.state.advanced_results

    `scope_param` names a path parameter whose value (a UUID) restricts
    results to rows where `scope_column` equals it. Routes without that path
    parameter are unscoped.
    """

    def __init__(
        self,
        model: Any,
        fields: ResourceFields,
        serializer: Callable[[Any], Dict[str, Any]],
        eager: Sequence[Eager] = (),
        scope_param: Optional[str] = None,
        scope_column: Any = None,
    ):
        self.model = model
        self.fields = fields
        self.serializer = serializer
        self.eager = tuple(eager)
        self.scope_param = scope_param
        self.scope_column = scope_column

    def _scope(self, request: Request) -> List[Any]:
        if self.scope_param is None:
            return []
        raw = request.path_params.get(self.scope_param)
        if raw is None:
            return []
        try:
            value = uuid.UUID(str(raw))
        except ValueError:
            raise BadRequestError(message=f"Invalid id: {raw}", field=self.scope_param)
        return [self.scope_column == value]

    async def __call__(
        self,
        request: Request,
        response: Response,
        db: AsyncSession = Depends(get_db_session),
    ) -> Dict[str, Any]:
        query = parse_query_params(request.query_params, self.fields)
        envelope, total = await run_query(
            db,
            self.model,
            self.fields,
            query,
            self.serializer,
            eager=self.eager,
            scope=self._scope(request),
        )
        response.headers["X-Total-Count"] = str(total)
        logger.debug(
            "%s query: %d filters, page=%d limit=%d → %d/%d rows",
            self.model.__tablename__,
            len(query.conditions),
            query.page,
            query.limit,
            envelope["count"],
            total,
        )
        request.state.advanced_results = envelope
        return envelope
