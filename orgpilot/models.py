"""Typed models for organisation data returned by the OrgPilot backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, TypeAlias

from pydantic import TypeAdapter

NodeStatus: TypeAlias = Literal["active", "open", "former"]
NodeType: TypeAlias = Literal["person", "placeholder"]


@dataclass(frozen=True)
class OrgNode:
    """One position or person in the organisation hierarchy.

    `manager_id` is a lookup reference only. `direct_reports_count` is the
    backend's denormalised count and may lag behind the fetched children.
    """

    id: int
    full_name: str
    title: str | None = None
    email: str | None = None
    status: NodeStatus = "active"
    node_type: NodeType = "person"
    manager_id: int | None = None
    direct_reports_count: int = 0

    @property
    def is_leaf(self) -> bool:
        """Nodes without reports are leaves and never trigger a fetch."""
        return self.direct_reports_count <= 0

    @property
    def is_placeholder(self) -> bool:
        return self.node_type == "placeholder"

    @property
    def status_label(self) -> str | None:
        """Badge text for non-active nodes."""
        if self.status == "open":
            return "Open Position"
        if self.status == "former":
            return "Former"
        return None


@dataclass(frozen=True)
class OrgStructure:
    id: int
    name: str
    description: str | None = None
    is_primary: bool = False


@dataclass(frozen=True)
class OrgPageData:
    """Initial organisation page payload."""

    structure: OrgStructure
    root: OrgNode
    direct_reports: list[OrgNode] = field(default_factory=list)


org_node_list_adapter: TypeAdapter[list[OrgNode]] = TypeAdapter(list[OrgNode])
org_node_adapter: TypeAdapter[OrgNode] = TypeAdapter(OrgNode)
org_structure_adapter: TypeAdapter[OrgStructure] = TypeAdapter(OrgStructure)


def parse_direct_reports(payload: object) -> list[OrgNode]:
    """Parse a direct-reports response body.

    A missing `directReports` key is an empty list. Raises
    `pydantic.ValidationError` for malformed records.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object, got {type(payload).__name__}")
    reports = payload.get("directReports")
    if reports is None:
        return []
    return org_node_list_adapter.validate_python(reports)
