"""
React Flow Reader

Converts React Flow JSON (as edited in the browser) back to a ProcessGraph.
"""

from typing import Dict, List, Any, Optional

from pydantic import ValidationError

from schemas.process_graph import ProcessGraph, ProcessNode, ProcessEdge, NodeKind, OPERATION_ATTRIBUTE
from .errors import GraphReadError


class ReactFlowReader:
    """
    Maps React Flow nodes and edges to the canonical graph.
    Decision and merge nodes share a kind so a merge closes a decision.
    """

    def __init__(self):
        self.type_mapping = {
            "start": NodeKind.START,
            "end": NodeKind.END,
            "default": NodeKind.TASK,
            "task": NodeKind.TASK,
            "process": NodeKind.TASK,
            "decision": NodeKind.EXCLUSIVE_GATEWAY,
            "merge": NodeKind.EXCLUSIVE_GATEWAY,
            "parallel": NodeKind.PARALLEL_GATEWAY,
            "subprocess": NodeKind.SUBPROCESS,
        }

    def read(self, reactflow_data: Dict[str, Any]) -> ProcessGraph:
        """
        Convert React Flow JSON to a ProcessGraph.

        Args:
            reactflow_data: {"nodes": [...], "edges": [...], "metadata": {...}}

        Returns:
            ProcessGraph for the top-level process
        """
        metadata = reactflow_data.get("metadata") or {}
        attributes = self._read_attributes(metadata)

        try:
            return self._read_graph(
                reactflow_data,
                graph_id=metadata.get("flow_id") or "Process",
                name=metadata.get("flow_name"),
                attributes=attributes,
            )
        except ValidationError as e:
            raise GraphReadError(f"Invalid React Flow data: {e}")

    def _read_graph(
        self, reactflow_data: Dict[str, Any], graph_id: str, name: Optional[str], attributes: Dict[str, str]
    ) -> ProcessGraph:
        nodes: List[ProcessNode] = []
        for rf_node in reactflow_data.get("nodes", []):
            if "id" not in rf_node:
                raise GraphReadError("React Flow node without an id")
            node_data = rf_node.get("data") or rf_node

            rf_type = rf_node.get("type", node_data.get("type", "default"))
            kind = self.type_mapping.get(rf_type, NodeKind.OTHER)

            subprocess = None
            if kind == NodeKind.SUBPROCESS:
                nested = node_data.get("subprocess")
                if nested is not None:
                    subprocess = self._read_graph(
                        nested,
                        graph_id=rf_node["id"],
                        name=node_data.get("label"),
                        attributes=self._read_attributes(node_data),
                    )

            nodes.append(ProcessNode(
                id=rf_node["id"],
                kind=kind,
                name=node_data.get("label", rf_node.get("label")),
                attributes=self._read_attributes(node_data),
                subprocess=subprocess,
            ))

        edges: List[ProcessEdge] = []
        for rf_edge in reactflow_data.get("edges", []):
            if "source" not in rf_edge or "target" not in rf_edge:
                raise GraphReadError(f"React Flow edge '{rf_edge.get('id')}' is missing its source or target")
            edges.append(ProcessEdge(
                id=rf_edge.get("id", f"edge-{rf_edge['source']}-{rf_edge['target']}"),
                source=rf_edge["source"],
                target=rf_edge["target"],
                name=rf_edge.get("condition") or rf_edge.get("label"),
            ))

        return ProcessGraph(id=graph_id, name=name, attributes=attributes, nodes=nodes, edges=edges)

    @staticmethod
    def _read_attributes(node_data: Dict[str, Any]) -> Dict[str, str]:
        attributes = {key: str(value) for key, value in (node_data.get("attributes") or {}).items()}
        if node_data.get("operation"):
            attributes[OPERATION_ATTRIBUTE] = str(node_data["operation"])
        return attributes
