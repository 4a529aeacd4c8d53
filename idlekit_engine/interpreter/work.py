"""Units of work on the interpreter's traversal stack."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict


class Step(str, Enum):
    WALK = "walk"    # follow every outgoing edge of the node
    VISIT = "visit"  # run the node itself, reached through an edge


@dataclass
class WorkItem:
    step: Step
    node_id: str
    context: Dict[str, Any] = field(default_factory=dict)


def walk(node_id: str, context: Dict[str, Any]) -> WorkItem:
    return WorkItem(Step.WALK, node_id, context)


def visit(node_id: str, context: Dict[str, Any]) -> WorkItem:
    return WorkItem(Step.VISIT, node_id, context)
