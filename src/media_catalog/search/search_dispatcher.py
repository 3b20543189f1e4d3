"""Routes a search criterion to the matching repository query."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..exceptions import InvalidSearchArgumentsError, InvalidSearchKindError
from .search_models import SearchCriterion, SearchKind, SearchRule


@dataclass(slots=True)
class SearchDispatcher:
    """Validates a criterion against a closed table of rules and runs the query.

    Checks run in a fixed order: at least one argument, kind supported,
    exact arity where the rule fixes one, then argument coercion. Results
    are returned unfiltered; status filtering belongs to the caller.
    """

    context: str
    rules: Mapping[SearchKind, SearchRule]
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    @property
    def valid_kinds(self) -> list[str]:
        return [kind.name for kind in self.rules]

    def resolve(self, criterion: SearchCriterion) -> list[Any]:
        args = criterion.args
        if len(args) == 0:
            raise InvalidSearchArgumentsError(
                "Invalid number of arguments, expected at least 1",
                kind=str(criterion.kind),
            )

        kind = self._lookup_kind(criterion.kind)
        rule = self.rules[kind]

        if rule.arity is not None and len(args) != rule.arity:
            raise InvalidSearchArgumentsError(
                f"Invalid number of arguments, expected {rule.arity}, got: {len(args)}",
                kind=kind.name,
            )

        consumed = args if rule.collect or rule.arity is not None else args[:1]
        values = [self._coerce(kind, rule, value) for value in consumed]

        self.log.debug(
            "search.dispatch",
            extra={"context": self.context, "kind": kind.name, "args": [str(value) for value in values]},
        )
        if rule.collect:
            return rule.query(values)
        return rule.query(*values)

    def _lookup_kind(self, raw: SearchKind | str) -> SearchKind:
        kind: SearchKind | None
        if isinstance(raw, SearchKind):
            kind = raw
        else:
            normalized = str(raw).strip().lower()
            kind = next((member for member in SearchKind if member.value == normalized), None)
        if kind is None or kind not in self.rules:
            label = kind.name if kind is not None else str(raw)
            raise InvalidSearchKindError(label, self.valid_kinds, context=self.context)
        return kind

    @staticmethod
    def _coerce(kind: SearchKind, rule: SearchRule, value: Any) -> Any:
        try:
            return rule.coerce(value)
        except (TypeError, ValueError) as exc:
            raise InvalidSearchArgumentsError(
                f"Invalid argument '{value}' for search kind {kind.name}: {exc}",
                kind=kind.name,
            ) from exc
