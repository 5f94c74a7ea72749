from __future__ import annotations

import logging
from typing import Any, List, Optional

from app.core.errors import DomainError, MalformedFilterInput, TypeCoercionAmbiguous
from app.domain.filter_tree import FilterGroup
from app.domain.schema import ListQueryPayload
from app.domain.shape import adapt_input

logger = logging.getLogger(__name__)

# Text values that read the same under every boolean convention we accept.
_PLAIN_BOOLEAN_TEXT = ("", "0", "1")


def coerce_boolean(value: Any, *, strict: bool = False) -> bool:
    """
    Resolve a boolean-ish transport value to True/False.

    Strings are matched case-insensitively against "true"/"false" before any
    truthiness rule, so a literal "false" reads as False. Other strings are
    False only when empty or "0". Non-strings fall back to bool().

    With strict=True, strings outside true/false/""/"0"/"1" and any value
    that is not None or a number raise TypeCoercionAmbiguous.
    """
    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        token = value.lower()
        if token == "true":
            return True
        if token == "false":
            return False
        if strict and value not in _PLAIN_BOOLEAN_TEXT:
            raise TypeCoercionAmbiguous(f"Cannot read {value!r} as a boolean.")
        return value not in ("", "0")

    if strict and not (value is None or isinstance(value, (int, float))):
        raise TypeCoercionAmbiguous(
            f"Cannot read value of type {type(value).__name__} as a boolean."
        )
    return bool(value)


def normalize_order_specs(value: Any, path: str = "orderSpecs") -> List[str]:
    plain = adapt_input(value, path)
    if not plain:
        return []

    if isinstance(plain, dict):
        entries = list(plain.values())
    elif isinstance(plain, list):
        entries = plain
    else:
        raise MalformedFilterInput("must be a list of order specs.", path)

    specs: List[str] = []
    for i, entry in enumerate(entries):
        if entry is None or isinstance(entry, (dict, list)):
            raise MalformedFilterInput("order spec must be a string.", f"{path}[{i}]")
        specs.append(entry if isinstance(entry, str) else str(entry))
    return specs


def build_filter(search_params: Any) -> Optional[FilterGroup]:
    """
    Build the root filter group, or None when nothing filterable was sent.

    A root group is created when `rules` is non-empty or `groups` is present
    at all; a bare `groupOp` does not produce an empty predicate. A list is
    not a filter document and is skipped; scalars are rejected.
    """
    plain = adapt_input(search_params, "searchParams")
    if plain is None or isinstance(plain, list):
        return None

    if not isinstance(plain, dict):
        raise MalformedFilterInput("must be a map with 'groupOp', 'rules' and/or 'groups'.")

    if not plain.get("rules") and plain.get("groups") is None:
        return None

    return FilterGroup.parse(plain)


def _require_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DomainError(f"'{name}' must be an integer, got {type(value).__name__}.")
    return value


class PaginatedQueryRequest:
    """
    Normalized list query: paging window, filter tree and ordering.

    Every setter re-runs the same coercion the constructor applies, so a
    caller can override a single field afterwards (e.g. switch pagination
    off for an export) without breaking the invariants.

    With strict_booleans=True the two flags reject values that are neither
    a plain boolean token nor a number (see coerce_boolean).
    """

    def __init__(
        self,
        page: int,
        page_size: int,
        search_enabled: Any,
        search_params: Any,
        order_specs: Any,
        pagination_enabled: Any,
        mandatory_order_specs: Any = None,
        *,
        strict_booleans: bool = False,
    ):
        self.strict_booleans = strict_booleans
        self.page = page
        self.page_size = page_size
        self.order_specs = order_specs
        self.search_enabled = search_enabled
        self.pagination_enabled = pagination_enabled
        self.filter = search_params
        self.mandatory_order_specs = mandatory_order_specs

        logger.debug(
            "Normalized list query: search_enabled=%s filter=%s order_specs=%d mandatory=%d",
            self._search_enabled,
            "set" if self._filter is not None else "unset",
            len(self._order_specs),
            len(self._mandatory_order_specs),
            extra={"page": self._page, "page_size": self._page_size},
        )

    @property
    def page(self) -> int:
        return self._page

    @page.setter
    def page(self, value: Any) -> None:
        self._page = _require_int(value, "page")

    @property
    def page_size(self) -> int:
        return self._page_size

    @page_size.setter
    def page_size(self, value: Any) -> None:
        self._page_size = _require_int(value, "itemCount")

    @property
    def search_enabled(self) -> bool:
        return self._search_enabled

    @search_enabled.setter
    def search_enabled(self, value: Any) -> None:
        self._search_enabled = coerce_boolean(value, strict=self.strict_booleans)

    @property
    def filter(self) -> Optional[FilterGroup]:
        return self._filter

    @filter.setter
    def filter(self, search_params: Any) -> None:
        self._filter = build_filter(search_params)

    @property
    def order_specs(self) -> List[str]:
        return self._order_specs

    @order_specs.setter
    def order_specs(self, value: Any) -> None:
        self._order_specs = normalize_order_specs(value, "orderSpecs")

    @property
    def pagination_enabled(self) -> bool:
        return self._pagination_enabled

    @pagination_enabled.setter
    def pagination_enabled(self, value: Any) -> None:
        self._pagination_enabled = coerce_boolean(value, strict=self.strict_booleans)

    @property
    def mandatory_order_specs(self) -> List[str]:
        return self._mandatory_order_specs

    @mandatory_order_specs.setter
    def mandatory_order_specs(self, value: Any) -> None:
        self._mandatory_order_specs = normalize_order_specs(value, "mandatoryOrderSpecs")

    def to_dict(self) -> dict:
        return {
            "page": self._page,
            "itemCount": self._page_size,
            "searchEnabled": self._search_enabled,
            "resultShouldBePaginated": self._pagination_enabled,
            "searchParams": self._filter.to_payload() if self._filter is not None else None,
            "orderSpecs": list(self._order_specs),
            "mandatoryOrderSpecs": list(self._mandatory_order_specs),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()!r})"


def normalize_request(req: ListQueryPayload, *, strict_booleans: bool = False) -> PaginatedQueryRequest:
    return PaginatedQueryRequest(
        page=req.page,
        page_size=req.item_count,
        search_enabled=req.search_enabled,
        search_params=req.search_params,
        order_specs=req.order_specs,
        pagination_enabled=req.result_should_be_paginated,
        mandatory_order_specs=req.mandatory_order_specs,
        strict_booleans=strict_booleans,
    )
