"""
Deterministic Translator Layer

Reads process models into the canonical ProcessGraph and converts
ProcessGraph to the nested ProcessTree format.
"""

from .tree_translator import GraphToTreeConverter
from .bpmn_xml_reader import BpmnXmlReader
from .reactflow_reader import ReactFlowReader
from .errors import (
    ProcessTreeError, MalformedGraphError, InconsistentJoinError,
    MissingOperationBindingError, GraphReadError
)

__all__ = [
    'GraphToTreeConverter', 'BpmnXmlReader', 'ReactFlowReader',
    'ProcessTreeError', 'MalformedGraphError', 'InconsistentJoinError',
    'MissingOperationBindingError', 'GraphReadError'
]
