"""Fixed, hand-declared statement templates.

Each entity declares one template per operation. Templates use named bind
parameters (``:api_id``) and declare their parameter names explicitly, in the
order they appear in the SQL; a mismatch is a programming error caught when
the template is built.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

# Same rule SQLAlchemy's text() uses to find bind parameters.
_BIND_PARAM = re.compile(r"(?<![:\w\\]):(\w+)(?!:)", re.UNICODE)


def placeholders(query: str) -> tuple[str, ...]:
    """Distinct bind parameter names in order of first appearance."""
    seen: list[str] = []
    for name in _BIND_PARAM.findall(query):
        if name not in seen:
            seen.append(name)
    return tuple(seen)


@dataclass(frozen=True)
class Statement:
    """A parameterized statement and its declared parameter order."""

    query: str
    params: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.params, tuple):
            object.__setattr__(self, "params", tuple(self.params))
        found = placeholders(self.query)
        if found != self.params:
            raise ValueError(
                f"Declared params {list(self.params)} do not match "
                f"placeholders {list(found)} in: {self.query.strip()}"
            )

    def bind(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """Bind values from row in declared order. Missing values bind as NULL."""
        return {name: row.get(name) for name in self.params}

    def filtered(self, names: Iterable[str], limit: int | None = None) -> Statement:
        """Return a copy with an equality WHERE clause on names (and a LIMIT)."""
        names = list(names)
        query = self.query.strip().rstrip(";")
        if names:
            query += " WHERE " + " AND ".join(f"{n} = :{n}" for n in names)
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        return Statement(query, self.params + tuple(names))


@dataclass(frozen=True)
class StatementSet:
    """All statements an entity repository may run.

    ``custom_checks`` holds named existence checks (uniqueness and the like);
    ``foreign`` maps each foreign field to the statement that looks up the
    referenced identifier.
    """

    insert: Statement
    update: Statement
    select: Statement
    select_one: Statement
    delete: Statement
    custom_checks: Mapping[str, Statement] = field(default_factory=dict)
    foreign: Mapping[str, Statement] = field(default_factory=dict)
