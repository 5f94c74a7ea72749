from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.domain.filter_tree import FilterGroup


class StrictBaseModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class ListQueryPayload(StrictBaseModel):
    """Raw list query as sent by clients; only the paging window is typed."""

    page: int
    item_count: int = Field(alias="itemCount")

    # Boolean-ish: bool, "true"/"false" in any case, or a truthy scalar.
    search_enabled: Any = Field(default=False, alias="searchEnabled")
    result_should_be_paginated: Any = Field(default=True, alias="resultShouldBePaginated")

    # Map/list, object-like or a serialized JSON string.
    search_params: Any = Field(default=None, alias="searchParams")
    order_specs: Any = Field(default=None, alias="orderSpecs")
    mandatory_order_specs: Any = Field(default=None, alias="mandatoryOrderSpecs")


class NormalizedQuery(StrictBaseModel):
    page: int
    item_count: int = Field(alias="itemCount")
    search_enabled: bool = Field(alias="searchEnabled")
    result_should_be_paginated: bool = Field(alias="resultShouldBePaginated")
    search_params: Optional[FilterGroup] = Field(default=None, alias="searchParams")
    order_specs: List[str] = Field(default_factory=list, alias="orderSpecs")
    mandatory_order_specs: List[str] = Field(default_factory=list, alias="mandatoryOrderSpecs")
