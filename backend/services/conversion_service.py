"""
Conversion Service

Reads process models and converts them to process trees.
A fresh converter is built per call so no node info leaks between requests.
"""

from typing import Any, Dict, Optional
import json
import logging

import config
from schemas.process_graph import ProcessGraph, ProcessTree, find_graph_errors
from translators import GraphToTreeConverter, BpmnXmlReader, ReactFlowReader

logger = logging.getLogger(__name__)


class ConversionService:
    def __init__(
        self,
        root_key: Optional[str] = None,
        operation_attribute: Optional[str] = None,
        strict_joins: Optional[bool] = None,
    ):
        self.root_key = root_key or config.PROCESS_ROOT_KEY
        self.operation_attribute = operation_attribute or config.PROCESS_OPERATION_ATTRIBUTE
        self.strict_joins = config.PROCESS_STRICT_JOINS if strict_joins is None else strict_joins

        self.bpmn_reader = BpmnXmlReader()
        self.reactflow_reader = ReactFlowReader()

    def new_converter(self) -> GraphToTreeConverter:
        return GraphToTreeConverter(
            root_key=self.root_key,
            operation_attribute=self.operation_attribute,
            strict_joins=self.strict_joins,
        )

    def convert_graph(self, graph: ProcessGraph) -> ProcessTree:
        # Lenient: report structure problems, let the converter fail on the ones it actually meets
        structure_errors = find_graph_errors(graph)
        if structure_errors:
            logger.warning(f"Process '{graph.id}' has structure warnings: {'; '.join(structure_errors)}")

        result = self.new_converter().convert(graph)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(f"Process tree for '{graph.id}': {json.dumps(result.tree)}")
        return result

    def convert_bpmn(self, xml_content: bytes) -> ProcessTree:
        return self.convert_graph(self.bpmn_reader.read(xml_content))

    def convert_reactflow(self, reactflow_data: Dict[str, Any]) -> ProcessTree:
        return self.convert_graph(self.reactflow_reader.read(reactflow_data))
