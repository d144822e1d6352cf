"""
BPMN XML Reader

Builds a ProcessGraph from BPMN 2.0 XML as written by bpmn-js and similar
modelers. Only control flow is read; lanes and diagram interchange are ignored.
"""

from typing import Dict, List, Optional
import logging
import re

from lxml import etree

from schemas.process_graph import ProcessGraph, ProcessNode, ProcessEdge, NodeKind
from .errors import GraphReadError

logger = logging.getLogger(__name__)


class BpmnXmlReader:
    """
    Reads the first bpmn:process of a definitions document.

    Extension attributes are kept by their local name, so rpa:operation="click"
    ends up as attributes["operation"] == "click".
    """

    BPMN_NS = {'bpmn': 'http://www.omg.org/spec/BPMN/20100524/MODEL'}
    XSI_URI = 'http://www.w3.org/2001/XMLSchema-instance'

    TASK_TAGS = {
        'task', 'userTask', 'serviceTask', 'manualTask', 'scriptTask',
        'sendTask', 'receiveTask', 'businessRuleTask', 'callActivity'
    }
    KIND_BY_TAG = {
        'startEvent': NodeKind.START,
        'endEvent': NodeKind.END,
        'exclusiveGateway': NodeKind.EXCLUSIVE_GATEWAY,
        'parallelGateway': NodeKind.PARALLEL_GATEWAY,
        'subProcess': NodeKind.SUBPROCESS,
    }
    # Children of a process that are not flow nodes
    NON_FLOW_TAGS = {
        'sequenceFlow', 'laneSet', 'documentation', 'extensionElements', 'textAnnotation',
        'association', 'dataObject', 'dataObjectReference', 'dataStoreReference',
        'group', 'ioSpecification', 'property', 'incoming', 'outgoing'
    }

    def read(self, xml_content: bytes) -> ProcessGraph:
        try:
            root = etree.fromstring(xml_content)
        except etree.XMLSyntaxError as e:
            raise GraphReadError(f"Invalid BPMN XML: {e}")

        if etree.QName(root).localname == 'process':
            process = root
        else:
            processes = root.xpath('.//bpmn:process', namespaces=self.BPMN_NS)
            if not processes:
                raise GraphReadError("BPMN document does not contain a process")
            process = processes[0]

        process_id = process.get('id') or 'Process'
        graph = self._read_container(process, process_id, self._clean_name(process.get('name')))
        logger.info(f"Read BPMN process '{graph.id}' with {len(graph.nodes)} elements and {len(graph.edges)} flows")
        return graph

    def _read_container(self, element, container_id: str, name: Optional[str]) -> ProcessGraph:
        """Read a process or sub-process element into a graph."""
        nodes: List[ProcessNode] = []
        flows: List[ProcessEdge] = []
        outgoing_position: Dict[str, int] = {}
        bpmn_uri = self.BPMN_NS['bpmn']

        for child in element:
            if not isinstance(child.tag, str):
                continue  # comments and processing instructions
            qname = etree.QName(child)
            if qname.namespace != bpmn_uri:
                continue

            if qname.localname == 'sequenceFlow':
                flows.append(self._read_flow(child))
                continue
            if qname.localname in self.NON_FLOW_TAGS or not child.get('id'):
                continue

            nodes.append(self._read_node(child, qname.localname))
            for position, ref in enumerate(child.xpath('./bpmn:outgoing/text()', namespaces=self.BPMN_NS)):
                outgoing_position[ref.strip()] = position

        # Outgoing flows of a node keep the order of its bpmn:outgoing references
        flows.sort(key=lambda flow: outgoing_position.get(flow.id, len(flows)))

        return ProcessGraph(
            id=container_id,
            name=name,
            attributes=self._read_attributes(element),
            nodes=nodes,
            edges=flows,
        )

    def _read_node(self, element, tag: str) -> ProcessNode:
        node_id = element.get('id')
        name = self._clean_name(element.get('name'))
        kind = NodeKind.TASK if tag in self.TASK_TAGS else self.KIND_BY_TAG.get(tag, NodeKind.OTHER)

        subprocess = None
        if kind == NodeKind.SUBPROCESS:
            subprocess = self._read_container(element, node_id, name)

        return ProcessNode(
            id=node_id,
            kind=kind,
            name=name,
            attributes=self._read_attributes(element),
            subprocess=subprocess,
        )

    def _read_flow(self, element) -> ProcessEdge:
        flow_id = element.get('id')
        source = element.get('sourceRef')
        target = element.get('targetRef')
        if not flow_id or not source or not target:
            raise GraphReadError(f"Sequence flow '{flow_id}' is missing its source or target")
        return ProcessEdge(id=flow_id, source=source, target=target, name=element.get('name'))

    def _read_attributes(self, element) -> Dict[str, str]:
        """Collect namespaced extension attributes by local name."""
        attributes: Dict[str, str] = {}
        for key, value in element.attrib.items():
            qname = etree.QName(key)
            if qname.namespace is None or qname.namespace == self.XSI_URI:
                continue
            attributes[qname.localname] = value
        return attributes

    @staticmethod
    def _clean_name(name: Optional[str]) -> Optional[str]:
        if name is None:
            return None
        cleaned = re.sub(r'\s+', ' ', name).strip()
        return cleaned or None
