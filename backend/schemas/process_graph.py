# schemas/process_graph.py
from __future__ import annotations
from typing import List, Optional, Dict, Any, Union
from enum import Enum
from pydantic import BaseModel, Field, PrivateAttr

# ---------- Core Enums ----------

class NodeKind(str, Enum):
    START = "start"
    END = "end"
    TASK = "task"
    EXCLUSIVE_GATEWAY = "exclusive_gateway"
    PARALLEL_GATEWAY = "parallel_gateway"
    SUBPROCESS = "subprocess"
    OTHER = "other"

GATEWAY_KINDS = (NodeKind.EXCLUSIVE_GATEWAY, NodeKind.PARALLEL_GATEWAY)

OPERATION_ATTRIBUTE = "operation"

# ---------- Graph Models ----------

class ProcessNode(BaseModel):
    id: str
    kind: NodeKind = Field(default=NodeKind.TASK)
    name: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)

    # Only set for SUBPROCESS nodes
    subprocess: Optional[ProcessGraph] = None

    @property
    def label(self) -> str:
        return self.name or self.id

class ProcessEdge(BaseModel):
    id: str
    source: str
    target: str
    name: Optional[str] = None

class ProcessGraph(BaseModel):
    """
    A process (or sub-process) as an ordered list of nodes and sequence flows.

    Nodes never point at each other; everything is looked up by id through
    get_node() and outgoing(). The outgoing edges of a node keep the order in
    which they appear in `edges`.
    """
    id: str = "Process"
    name: Optional[str] = None
    attributes: Dict[str, str] = Field(default_factory=dict)
    nodes: List[ProcessNode] = Field(default_factory=list)
    edges: List[ProcessEdge] = Field(default_factory=list)

    _nodes_by_id: Optional[Dict[str, ProcessNode]] = PrivateAttr(default=None)
    _edges_by_source: Optional[Dict[str, List[ProcessEdge]]] = PrivateAttr(default=None)

    @property
    def label(self) -> str:
        return self.name or self.id

    def get_node(self, node_id: str) -> Optional[ProcessNode]:
        return self._node_index().get(node_id)

    def outgoing(self, node_id: str) -> List[ProcessEdge]:
        return self._outgoing_index().get(node_id, [])

    def start_nodes(self) -> List[ProcessNode]:
        return [n for n in self.nodes if n.kind == NodeKind.START]

    def _node_index(self) -> Dict[str, ProcessNode]:
        # Built lazily; the graph is treated as read-only once handed over
        if self._nodes_by_id is None:
            index: Dict[str, ProcessNode] = {}
            for n in self.nodes:
                index.setdefault(n.id, n)
            self._nodes_by_id = index
        return self._nodes_by_id

    def _outgoing_index(self) -> Dict[str, List[ProcessEdge]]:
        if self._edges_by_source is None:
            index: Dict[str, List[ProcessEdge]] = {}
            for e in self.edges:
                index.setdefault(e.source, []).append(e)
            self._edges_by_source = index
        return self._edges_by_source

ProcessNode.model_rebuild()

# ---------- Tree Models ----------

TreeNode = Union[str, Dict[str, List[Any]]]

class NodeInfo(BaseModel):
    label: str
    concept: str

class ProcessTree(BaseModel):
    tree: Dict[str, List[Any]]
    node_info: Dict[str, NodeInfo] = Field(default_factory=dict)

# ---------- Validation Helpers ----------

def find_graph_errors(graph: ProcessGraph) -> List[str]:
    """
    Report structural problems of a single process level:
    - node ids must be unique
    - every edge must connect two known nodes
    - exactly one START node
    Sub-process graphs are checked recursively, prefixed with their node id.
    """
    errs: List[str] = []
    seen: Dict[str, int] = {}

    for n in graph.nodes:
        seen[n.id] = seen.get(n.id, 0) + 1
    for node_id, count in seen.items():
        if count > 1:
            errs.append(f"Node id '{node_id}' is used {count} times")

    for e in graph.edges:
        if e.source not in seen:
            errs.append(f"Edge '{e.id}' source '{e.source}' not found")
        if e.target not in seen:
            errs.append(f"Edge '{e.id}' target '{e.target}' not found")

    starts = graph.start_nodes()
    if len(starts) != 1:
        errs.append(f"Process '{graph.id}' must have exactly 1 START node (has {len(starts)})")

    for n in graph.nodes:
        if n.kind == NodeKind.SUBPROCESS:
            if n.subprocess is None:
                errs.append(f"SUBPROCESS node '{n.id}' has no nested process")
                continue
            errs.extend(f"{n.id}: {err}" for err in find_graph_errors(n.subprocess))

    return errs
