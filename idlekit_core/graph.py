"""Logic graph model and index.

Nodes and edges are authored as plain records. ``LogicGraph`` indexes them
for dispatch (outgoing edges in authored order, event nodes by event type)
and mirrors them into a networkx MultiDiGraph for structural analysis.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from idlekit_core.events import known_event_names
from idlekit_core.utils.logging import get_logger

logger = get_logger("core.graph")


class NodeKind(str, Enum):
    EVENT = "event"
    ACTION = "action"
    CONDITION = "condition"
    LOGIC = "logic"


# data key holding the node's behavior tag, per kind
KIND_TAG_FIELD: Dict[str, str] = {
    NodeKind.EVENT.value: "eventType",
    NodeKind.ACTION.value: "actionType",
    NodeKind.CONDITION.value: "conditionType",
    NodeKind.LOGIC.value: "logicType",
}

TARGET_FIELDS: Tuple[str, ...] = ("resourceId", "buildingId", "upgradeId", "achievementId")


# ============================================================================
# Authored records
# ============================================================================


class LogicNode(BaseModel):
    """A node of the logic graph.

    ``type`` is the node kind (event/action/condition/logic). The behavior
    within the kind lives in ``data`` under ``eventType``/``actionType``/
    ``conditionType``/``logicType``. Unknown kinds are accepted here and
    skipped at dispatch.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    type: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @property
    def tag(self) -> Optional[str]:
        field = KIND_TAG_FIELD.get(self.type)
        return self.data.get(field) if field else None

    def value(self, *names: str, default: Any = None) -> Any:
        """First non-empty value among ``names`` in ``data``."""
        for name in names:
            found = self.data.get(name)
            if found is not None and found != "":
                return found
        return default

    def number(self, *names: str, default: Optional[float] = None) -> Optional[float]:
        """Like ``value`` but coerced to float; unparsable values give ``default``."""
        raw = self.value(*names)
        if raw is None:
            return default
        try:
            return float(raw)
        except (TypeError, ValueError):
            logger.warning(f"Node {self.id}: expected a number for {names[0]}, got {raw!r}")
            return default

    @property
    def target_id(self) -> Optional[str]:
        return self.value(*TARGET_FIELDS)


class LogicEdge(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    source: str
    target: str
    source_handle: Optional[str] = Field(
        None, validation_alias=AliasChoices("sourceHandle", "source_handle")
    )


class LogicDefinition(BaseModel):
    """The ``logic`` block of a template."""

    nodes: List[LogicNode] = Field(default_factory=list)
    edges: List[LogicEdge] = Field(default_factory=list)


class GraphReport(BaseModel):
    """Result of ``LogicGraph.analyze``; errors block nothing at runtime."""

    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


# ============================================================================
# Index
# ============================================================================


class LogicGraph:
    """Read-only index over a ``LogicDefinition``."""

    def __init__(self, definition: Optional[LogicDefinition] = None):
        self.definition = definition or LogicDefinition()
        self.nodes: Dict[str, LogicNode] = {}
        self._outgoing: Dict[str, List[LogicEdge]] = {}
        self._events: Dict[str, List[LogicNode]] = {}
        self._broken: List[LogicEdge] = []
        self.graph = nx.MultiDiGraph()

        for node in self.definition.nodes:
            if node.id in self.nodes:
                logger.warning(f"Duplicate node id {node.id}; keeping the first")
                continue
            self.nodes[node.id] = node
            self.graph.add_node(node.id, kind=node.type, tag=node.tag)
            if node.type == NodeKind.EVENT.value and node.tag:
                self._events.setdefault(node.tag, []).append(node)

        for edge in self.definition.edges:
            if edge.source not in self.nodes or edge.target not in self.nodes:
                logger.warning(f"Edge {edge.source} -> {edge.target} references a missing node")
                self._broken.append(edge)
                continue
            self._outgoing.setdefault(edge.source, []).append(edge)
            self.graph.add_edge(edge.source, edge.target, handle=edge.source_handle)

    @property
    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def get(self, node_id: str) -> Optional[LogicNode]:
        return self.nodes.get(node_id)

    def outgoing(self, node_id: str) -> List[LogicEdge]:
        """Outgoing edges in authored order."""
        return self._outgoing.get(node_id, [])

    def event_nodes(self, event_type: str) -> List[LogicNode]:
        return self._events.get(event_type, [])

    def analyze(self) -> GraphReport:
        """Lint the graph for authoring mistakes.

        Errors: edges to missing nodes, unknown node kinds, no event nodes
        at all. Warnings: orphaned non-event nodes, event nodes with no
        outgoing edge, unknown event names, cycles with no condition, random
        or delay node to end them.
        """
        report = GraphReport()

        for edge in self._broken:
            report.errors.append(f"Edge {edge.source} -> {edge.target} references a missing node")

        for node in self.nodes.values():
            if node.type not in KIND_TAG_FIELD:
                report.errors.append(f"Node {node.id} has unknown type '{node.type}'")

        if self.nodes and not self._events:
            report.errors.append("Graph has no event nodes; nothing will ever run")

        event_names = known_event_names()
        for node in self.nodes.values():
            if node.type == NodeKind.EVENT.value:
                if self.graph.out_degree(node.id) == 0:
                    report.warnings.append(f"Event node {node.id} ({node.tag}) has no outgoing edges")
                if node.tag not in event_names:
                    report.warnings.append(f"Event node {node.id} listens for unknown event '{node.tag}'")
            elif self.graph.in_degree(node.id) == 0:
                report.warnings.append(f"Node {node.id} is never reached (no incoming edges)")

        for cycle in nx.simple_cycles(nx.DiGraph(self.graph)):
            if not any(self._ends_cycle(node_id) for node_id in cycle):
                path = " -> ".join(cycle + [cycle[0]])
                report.warnings.append(f"Cycle without a condition, random or delay node: {path}")

        return report

    def _ends_cycle(self, node_id: str) -> bool:
        node = self.nodes[node_id]
        if node.type == NodeKind.CONDITION.value:
            return True
        return node.type == NodeKind.LOGIC.value and node.tag in ("random", "delay")
