from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from app.core.errors import MalformedFilterInput

RULE_KEYS = ("field", "op", "data")
MAX_GROUP_DEPTH = 32


class GroupOp(str, Enum):
    AND = "AND"
    OR = "OR"


class FilterModel(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class FilterRule(FilterModel):
    field: str
    operator: str = Field(alias="op")
    value: Any = Field(default=None, alias="data")

    @classmethod
    def parse(cls, raw: Any, path: str) -> "FilterRule":
        if not isinstance(raw, Mapping):
            raise MalformedFilterInput("rule entry must be a map.", path)

        for key in RULE_KEYS:
            if key not in raw:
                raise MalformedFilterInput(f"missing required key '{key}'.", path)

        field, op = raw["field"], raw["op"]
        if not isinstance(field, str) or not field:
            raise MalformedFilterInput("'field' must be a non-empty string.", path)
        if not isinstance(op, str) or not op:
            raise MalformedFilterInput("'op' must be a non-empty string.", path)

        return cls(field=field, operator=op, value=raw["data"])


class FilterGroup(FilterModel):
    """
    A combinator over an ordered sequence of rules and nested groups.

    `children` keeps rules and groups interleaved in insertion order;
    `rules` and `groups` are views over it and are what goes on the wire.
    """

    group_op: GroupOp = Field(alias="groupOp")
    children: List[Union[FilterRule, FilterGroup]] = Field(default_factory=list, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _collect_children(cls, data: Any) -> Any:
        # Wire form carries two arrays; rules come before groups.
        if isinstance(data, Mapping) and ("rules" in data or "groups" in data):
            data = dict(data)
            children = list(data.pop("children", None) or [])
            children.extend(data.pop("rules", None) or [])
            children.extend(data.pop("groups", None) or [])
            data["children"] = children
        return data

    @computed_field  # type: ignore[prop-decorator]
    @property
    def rules(self) -> List[FilterRule]:
        return [child for child in self.children if isinstance(child, FilterRule)]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def groups(self) -> List[FilterGroup]:
        return [child for child in self.children if isinstance(child, FilterGroup)]

    def add_rule(self, rule: FilterRule) -> None:
        self.children.append(rule)

    def add_group(self, group: FilterGroup) -> None:
        self.children.append(group)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def parse(cls, raw: Any, path: str = "", depth: int = 0) -> "FilterGroup":
        """
        Build a group from its plain-map form, descending into nested groups.

        `path` locates `raw` inside the searchParams document and prefixes
        every MalformedFilterInput raised below it, e.g. `groups[2].rules[0]`.
        Groups may nest at most MAX_GROUP_DEPTH levels below the root.
        """
        if depth > MAX_GROUP_DEPTH:
            raise MalformedFilterInput(
                f"groups are nested deeper than {MAX_GROUP_DEPTH} levels.", path or None
            )
        if not isinstance(raw, Mapping):
            raise MalformedFilterInput("group entry must be a map.", path or None)

        group = cls(group_op=_parse_group_op(raw, path))

        for i, entry in enumerate(_entries(raw, "rules", path)):
            group.add_rule(FilterRule.parse(entry, _join(path, f"rules[{i}]")))

        for i, entry in enumerate(_entries(raw, "groups", path)):
            group.add_group(cls.parse(entry, _join(path, f"groups[{i}]"), depth + 1))

        return group


def _parse_group_op(raw: Mapping, path: str) -> GroupOp:
    if "groupOp" not in raw:
        raise MalformedFilterInput("missing required key 'groupOp'.", path or None)

    op = raw["groupOp"]
    if isinstance(op, str) and op.upper() in GroupOp.__members__:
        return GroupOp[op.upper()]

    raise MalformedFilterInput(
        f"'groupOp' must be one of {[m.value for m in GroupOp]}, got {op!r}.",
        path or None,
    )


def _entries(raw: Mapping, key: str, path: str) -> List[Any]:
    # Index-keyed maps ({"0": {...}, "1": {...}}) are read in insertion order.
    value = raw.get(key)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, Mapping):
        return list(value.values())

    raise MalformedFilterInput(f"'{key}' must be a list.", path or None)


def _join(path: str, part: str) -> str:
    return f"{path}.{part}" if path else part
