# Copyright (c) 2026 Multitenant Contributors. All Rights Reserved.

"""
Query Builder — Mutable predicate list + positional bindings.

A QueryBuilder keeps two ordered lists:
  - wheres:   every predicate, in the order it was added
  - bindings: one value per value-consuming predicate (kind "basic")

"null" / "not_null" predicates consume no binding. Compilation reads
values from ``bindings`` by position, never from ``Where.value``, so the
Nth basic predicate always renders with the Nth binding.
"""

from __future__ import annotations

import operator as _op
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import (
    Select, and_, column as sa_column, literal_column, or_, select, table as sa_table,
)

WHERE_BASIC = "basic"
WHERE_NULL = "null"
WHERE_NOT_NULL = "not_null"

OPERATORS: Dict[str, Callable[[Any, Any], Any]] = {
    "=": _op.eq,
    "!=": _op.ne,
    "<>": _op.ne,
    "<": _op.lt,
    "<=": _op.le,
    ">": _op.gt,
    ">=": _op.ge,
    "like": lambda col, value: col.like(value),
    "not like": lambda col, value: col.not_like(value),
}

_UNSET = object()


def qualify(table: str, column: str) -> str:
    """``"<table>.<column>"``; already-qualified names pass through."""
    return column if "." in column else f"{table}.{column}"


def split_column(column: str) -> tuple[str, str]:
    """Inverse of qualify(): ``("<table>", "<column>")``, table may be empty."""
    table, _, name = column.rpartition(".")
    return table, name


@dataclass
class Where:
    """One predicate clause."""

    kind: str
    column: str
    operator: Optional[str] = None
    value: Any = None
    boolean: str = "and"
    scoped: bool = False

    @property
    def consumes_binding(self) -> bool:
        return self.kind == WHERE_BASIC


class QueryBuilder:
    """
    Predicate/binding query representation for one table.

    ``model`` is the mapped class used to resolve columns at compile time;
    without it a lightweight ``sqlalchemy.table()`` is built on the fly.
    """

    def __init__(self, table: str, model: Optional[type] = None) -> None:
        self.table = table
        self.model = model
        self.wheres: List[Where] = []
        self.bindings: List[Any] = []
        self.orders: List[tuple[str, str]] = []
        self.limit_value: Optional[int] = None
        self._scopes: Dict[str, Any] = {}

    @classmethod
    def for_model(cls, model: type) -> "QueryBuilder":
        return cls(model.__table__.name, model)

    # ── Predicates ──────────────────────────────────────────────

    def where(
        self,
        column: str,
        operator: Any = _UNSET,
        value: Any = _UNSET,
        boolean: str = "and",
        scoped: bool = False,
    ) -> "QueryBuilder":
        """
        Add a predicate. ``where("a", 1)`` means ``where("a", "=", 1)``.

        Comparing to None becomes a null / not-null check. ``scoped``
        marks predicates added by a scope; they are always ANDed onto the
        rest of the query, whatever ``or_where`` calls follow.
        """
        if value is _UNSET:
            operator, value = "=", operator
        if operator is _UNSET:
            raise TypeError("where() needs a value")
        operator = str(operator).lower()
        if operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {operator!r}")

        if value is None and operator in ("=", "!=", "<>"):
            kind = WHERE_NULL if operator == "=" else WHERE_NOT_NULL
            self.wheres.append(Where(kind, column, boolean=boolean, scoped=scoped))
            return self

        self.wheres.append(Where(WHERE_BASIC, column, operator, value, boolean, scoped))
        self.bindings.append(value)
        return self

    def or_where(self, column: str, operator: Any = _UNSET, value: Any = _UNSET) -> "QueryBuilder":
        return self.where(column, operator, value, boolean="or")

    def where_null(self, column: str, boolean: str = "and") -> "QueryBuilder":
        self.wheres.append(Where(WHERE_NULL, column, boolean=boolean))
        return self

    def where_not_null(self, column: str, boolean: str = "and") -> "QueryBuilder":
        self.wheres.append(Where(WHERE_NOT_NULL, column, boolean=boolean))
        return self

    def insert_where(self, index: int, where: Where, binding: Any = _UNSET) -> "QueryBuilder":
        """Insert a predicate at ``index`` and, if it consumes one, its binding."""
        index = max(0, min(index, len(self.wheres)))
        if where.consumes_binding:
            self.add_binding(where.value if binding is _UNSET else binding,
                             self.binding_index_for(index))
        self.wheres.insert(index, where)
        return self

    def remove_where(self, index: int) -> Where:
        """Remove a predicate only. The caller owns the matching binding."""
        return self.wheres.pop(index)

    # ── Bindings ────────────────────────────────────────────────

    def add_binding(self, value: Any, index: Optional[int] = None) -> None:
        if index is None:
            self.bindings.append(value)
        else:
            self.bindings.insert(index, value)

    def remove_binding(self, index: int) -> Any:
        return self.bindings.pop(index)

    def binding_index_for(self, where_index: int) -> int:
        """Binding position of the predicate at ``where_index``."""
        return sum(1 for w in self.wheres[:where_index] if w.consumes_binding)

    def value_wheres(self) -> List[Where]:
        return [w for w in self.wheres if w.consumes_binding]

    def is_aligned(self) -> bool:
        """True when every basic predicate's value equals its positional binding."""
        values = [w.value for w in self.value_wheres()]
        return values == self.bindings

    # ── Ordering / limits ───────────────────────────────────────

    def order_by(self, column: str, direction: str = "asc") -> "QueryBuilder":
        direction = direction.lower()
        if direction not in ("asc", "desc"):
            raise ValueError(f"Unsupported direction: {direction!r}")
        self.orders.append((column, direction))
        return self

    def limit(self, value: int) -> "QueryBuilder":
        self.limit_value = value
        return self

    # ── Scopes ──────────────────────────────────────────────────

    def with_scope(self, name: str, scope: Any) -> "QueryBuilder":
        """Apply ``scope`` to this query and remember it under ``name``."""
        scope.apply(self, self.model)
        self._scopes[name] = scope
        return self

    def without_scope(self, name: str) -> "QueryBuilder":
        """Strip a previously applied scope. Unknown names are ignored."""
        scope = self._scopes.pop(name, None)
        if scope is not None:
            scope.remove(self, self.model)
        return self

    def without_scopes(self) -> "QueryBuilder":
        for name in list(self._scopes):
            self.without_scope(name)
        return self

    def has_scope(self, name: str) -> bool:
        return name in self._scopes

    @property
    def applied_scopes(self) -> List[str]:
        return list(self._scopes)

    # ── Compilation ─────────────────────────────────────────────

    def to_select(self) -> Select:
        """Compile to a SQLAlchemy Select. Values come from ``bindings``."""
        value_count = len(self.value_wheres())
        if value_count != len(self.bindings):
            raise ValueError(
                f"Query on '{self.table}' has {value_count} value predicates "
                f"but {len(self.bindings)} bindings"
            )

        if self.model is not None:
            tbl = self.model.__table__
            stmt = select(self.model)
        else:
            tbl = self._lightweight_table()
            stmt = select(literal_column("*")).select_from(tbl)

        criteria = self._criteria(tbl)
        if criteria is not None:
            stmt = stmt.where(criteria)
        for column, direction in self.orders:
            col = tbl.c[self._split(column)[1]]
            stmt = stmt.order_by(col.desc() if direction == "desc" else col.asc())
        if self.limit_value is not None:
            stmt = stmt.limit(self.limit_value)
        return stmt

    def _criteria(self, tbl):
        # Scoped predicates are ANDed onto a parenthesised group of the
        # remaining ones. Inside that group AND binds tighter than OR.
        scoped: list = []
        groups: List[list] = []
        cursor = 0
        for where in self.wheres:
            col = tbl.c[self._split(where.column)[1]]
            if where.kind == WHERE_NULL:
                clause = col.is_(None)
            elif where.kind == WHERE_NOT_NULL:
                clause = col.is_not(None)
            else:
                clause = OPERATORS[where.operator](col, self.bindings[cursor])
                cursor += 1

            if where.scoped:
                scoped.append(clause)
            elif where.boolean == "or" or not groups:
                groups.append([clause])
            else:
                groups[-1].append(clause)

        user = None
        if len(groups) == 1:
            user = and_(*groups[0])
        elif groups:
            user = or_(*(and_(*g) for g in groups))

        if not scoped:
            return user
        if user is None:
            return and_(*scoped)
        return and_(*scoped, user)

    def _split(self, column: str) -> tuple[str, str]:
        table, name = split_column(column)
        if table and table != self.table:
            raise ValueError(f"Column '{column}' does not belong to table '{self.table}'")
        return self.table, name

    def _lightweight_table(self):
        names: List[str] = []
        for col in [w.column for w in self.wheres] + [c for c, _ in self.orders]:
            name = self._split(col)[1]
            if name not in names:
                names.append(name)
        return sa_table(self.table, *(sa_column(n) for n in names))

    def __repr__(self) -> str:
        return (
            f"<QueryBuilder {self.table} wheres={len(self.wheres)} "
            f"bindings={len(self.bindings)} scopes={self.applied_scopes}>"
        )
