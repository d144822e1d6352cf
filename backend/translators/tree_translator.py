"""
Process Tree Translator

Converts a ProcessGraph into a strictly nested ProcessTree.
Splits are resolved into branch groups up to their join, sub-processes are
nested under their own key, and every executable element is listed in the
node info table in the order the walk discovers it.
"""

from typing import Dict, List, Optional, Tuple, Union
import logging

from schemas.process_graph import (
    ProcessGraph, ProcessNode, ProcessEdge, ProcessTree, NodeInfo, NodeKind, TreeNode,
    GATEWAY_KINDS, OPERATION_ATTRIBUTE
)
from .errors import MalformedGraphError, InconsistentJoinError, MissingOperationBindingError

logger = logging.getLogger(__name__)

FLOW_KEY = "Flow"
EMPTY_FRAGMENT = ""

# A process is owned either by the root graph or by the SUBPROCESS node that embeds it
ProcessOwner = Union[ProcessGraph, ProcessNode]


class GraphToTreeConverter:
    """
    Deterministic translator from ProcessGraph to ProcessTree.

    The node info table lives on the instance for the duration of one
    convert() call and is reset at the start of the next one.
    """

    def __init__(
        self,
        root_key: str = "Process",
        operation_attribute: str = OPERATION_ATTRIBUTE,
        strict_joins: bool = False,
    ):
        self.root_key = root_key
        self.operation_attribute = operation_attribute
        self.strict_joins = strict_joins
        self.node_info: Dict[str, NodeInfo] = {}

    def convert(self, graph: ProcessGraph) -> ProcessTree:
        """
        Convert a top-level process graph.

        Args:
            graph: Root process graph, left untouched

        Returns:
            ProcessTree holding the nested tree and the node info table
        """
        self.node_info = {}
        tree, _ = self.parse_process(graph)

        logger.info(f"Converted process '{graph.id}' to a tree with {len(self.node_info)} annotated elements")
        return ProcessTree(tree=tree, node_info=dict(self.node_info))

    def parse_process(
        self, graph: ProcessGraph, owner: Optional[ProcessOwner] = None
    ) -> Tuple[Dict[str, List[TreeNode]], ProcessOwner]:
        """
        Parse one process level from its start event to its end event.

        Returns the owner as the last element rather than the inner end event:
        the enclosing walk has to continue behind a sub-process, and the inner
        end event has no outgoing flow into the parent.
        """
        if owner is None:
            owner = graph

        start_flow = self.find_start_edge(graph)
        if start_flow is None:
            raise MalformedGraphError(f"Start event of process '{owner.id}' is not connected to a flow")

        first_element = graph.get_node(start_flow.target)
        if first_element is None:
            raise MalformedGraphError(
                f"Start flow '{start_flow.id}' of process '{owner.id}' points to unknown element '{start_flow.target}'"
            )

        segment, _ = self.walk_flow_until(graph, first_element, NodeKind.END)

        if self._operation_of(owner) is not None:
            process_tree = {owner.id: [segment]}
            self.record_node_info(owner)
        else:
            process_tree = {self.root_key: [segment]}

        return process_tree, owner

    def walk_flow_until(
        self, graph: ProcessGraph, start_node: ProcessNode, termination_kind: NodeKind
    ) -> Tuple[TreeNode, Optional[ProcessNode]]:
        """
        Walk the flow from start_node until an element of termination_kind.

        Args:
            graph: Process level the walk happens in
            start_node: First element of the segment
            termination_kind: Kind that ends the segment (END, or the kind of the opening split)

        Returns:
            (segment, element the walk stopped at). The element is None when
            the flow dead-ends before reaching termination_kind.
        """
        parsed: List[TreeNode] = []
        visited = set()
        current: Optional[ProcessNode] = start_node

        while current is not None and current.kind != termination_kind:
            if current.id in visited:
                raise MalformedGraphError(f"Flow returns to element '{current.id}' without passing a gateway")
            visited.add(current.id)

            fragment, last_element = self.resolve_segment(graph, current)
            parsed.append(fragment)

            current = self._next_in_flow(graph, last_element)

        if len(parsed) == 1:
            return parsed[0], current
        return {FLOW_KEY: parsed}, current

    def resolve_segment(
        self, graph: ProcessGraph, node: ProcessNode
    ) -> Tuple[TreeNode, Optional[ProcessNode]]:
        """
        Resolve an activity, a split block or a sub-process to a tree fragment.

        Any other element yields an empty leaf ("") and no next element, which
        ends the current walk.
        """
        if node.kind == NodeKind.TASK:
            self.record_node_info(node)
            return node.id, node

        if node.kind in GATEWAY_KINDS:
            return self.resolve_split(graph, node)

        if node.kind == NodeKind.SUBPROCESS:
            if node.subprocess is None:
                raise MalformedGraphError(f"Sub-process '{node.id}' has no nested process")
            return self.parse_process(node.subprocess, node)

        # End events reached inside a branch, intermediate events, ...
        logger.debug(f"Flow stops at '{node.id}' ({node.kind.value})")
        return EMPTY_FRAGMENT, None

    def resolve_split(
        self, graph: ProcessGraph, split_node: ProcessNode
    ) -> Tuple[Dict[str, List[TreeNode]], Optional[ProcessNode]]:
        """
        Resolve a block from a splitting gateway to its join.

        A join is recognized by having the same kind as the split. Branches are
        kept in the order of the split's outgoing flows.
        """
        branches: List[TreeNode] = []
        joins: List[ProcessNode] = []

        for flow in graph.outgoing(split_node.id):
            branch, join = self.walk_flow_until(graph, self._target_of(graph, flow), split_node.kind)
            branches.append(branch)

            if join is not None:
                joins.append(join)
            elif self.strict_joins:
                raise InconsistentJoinError(
                    f"Branch '{flow.id}' of gateway '{split_node.id}' ends before reaching a join"
                )

        if any(join.id != joins[0].id for join in joins):
            join_ids = ", ".join(sorted({join.id for join in joins}))
            raise InconsistentJoinError(
                f"Branches of gateway '{split_node.id}' end at different joins ({join_ids})"
            )

        self.record_node_info(split_node)
        return {split_node.id: branches}, (joins[0] if joins else None)

    def record_node_info(self, element: ProcessOwner) -> None:
        operation = self._operation_of(element)
        if operation is None:
            raise MissingOperationBindingError(
                element.id,
                f"Element '{element.id}' is not configured with an operation ('{self.operation_attribute}')",
            )
        self.node_info[element.id] = NodeInfo(label=element.label, concept=operation)

    @staticmethod
    def find_start_edge(graph: ProcessGraph) -> Optional[ProcessEdge]:
        """Find the sequence flow that leaves the start event, if any."""
        start_ids = {n.id for n in graph.start_nodes()}
        return next((e for e in graph.edges if e.source in start_ids), None)

    def _operation_of(self, element: ProcessOwner) -> Optional[str]:
        return element.attributes.get(self.operation_attribute) or None

    def _next_in_flow(self, graph: ProcessGraph, element: Optional[ProcessNode]) -> Optional[ProcessNode]:
        """Follow the first outgoing flow of element."""
        if element is None:
            return None
        outgoing = graph.outgoing(element.id)
        if not outgoing:
            return None
        return self._target_of(graph, outgoing[0])

    @staticmethod
    def _target_of(graph: ProcessGraph, flow: ProcessEdge) -> ProcessNode:
        target = graph.get_node(flow.target)
        if target is None:
            raise MalformedGraphError(f"Sequence flow '{flow.id}' points to unknown element '{flow.target}'")
        return target
