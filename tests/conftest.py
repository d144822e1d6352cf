"""Pytest configuration and fixtures."""
import sys
from pathlib import Path

import pytest

# Make the backend modules importable without installing the project
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from schemas.process_graph import ProcessGraph, ProcessNode, ProcessEdge, NodeKind  # noqa: E402


def make_node(node_id, kind="task", operation=None, name=None, subprocess=None):
    attributes = {"operation": operation} if operation else {}
    return ProcessNode(
        id=node_id,
        kind=NodeKind(kind),
        name=name,
        attributes=attributes,
        subprocess=subprocess,
    )


def make_graph(nodes, flows, graph_id="Process", name=None, attributes=None):
    """
    Build a graph from compact specs.

    nodes: ProcessNode instances or (id, kind[, operation]) tuples
    flows: (source, target) pairs, in outgoing order
    """
    built = [n if isinstance(n, ProcessNode) else make_node(*n) for n in nodes]
    edges = [
        ProcessEdge(id=f"Flow_{i}", source=source, target=target)
        for i, (source, target) in enumerate(flows, start=1)
    ]
    return ProcessGraph(id=graph_id, name=name, attributes=attributes or {}, nodes=built, edges=edges)


@pytest.fixture
def build_graph():
    return make_graph


@pytest.fixture
def build_node():
    return make_node


@pytest.fixture
def linear_graph():
    """Start -> A -> B -> C -> End"""
    return make_graph(
        [("Start", "start"), ("A", "task", "open"), ("B", "task", "type"),
         ("C", "task", "save"), ("End", "end")],
        [("Start", "A"), ("A", "B"), ("B", "C"), ("C", "End")],
    )


@pytest.fixture
def parallel_graph():
    """Start -> P -> {A, B} -> J -> End"""
    return make_graph(
        [("Start", "start"), ("P", "parallel_gateway", "parallel"), ("A", "task", "click"),
         ("B", "task", "type"), ("J", "parallel_gateway"), ("End", "end")],
        [("Start", "P"), ("P", "A"), ("P", "B"), ("A", "J"), ("B", "J"), ("J", "End")],
    )


BPMN_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<bpmn:definitions xmlns:bpmn="http://www.omg.org/spec/BPMN/20100524/MODEL"
                  xmlns:bpmndi="http://www.omg.org/spec/BPMN/20100524/DI"
                  xmlns:rpa="http://example.org/schema/rpa"
                  id="Definitions_1" targetNamespace="http://bpmn.io/schema/bpmn">
  <bpmn:process id="Process_1" isExecutable="false">
    <bpmn:startEvent id="StartEvent_1">
      <bpmn:outgoing>Flow_1</bpmn:outgoing>
    </bpmn:startEvent>
    <bpmn:task id="Task_Open" name="Open&#10;Browser" rpa:operation="openBrowser">
      <bpmn:incoming>Flow_1</bpmn:incoming>
      <bpmn:outgoing>Flow_2</bpmn:outgoing>
    </bpmn:task>
    <bpmn:parallelGateway id="Gateway_Split" rpa:operation="parallel">
      <bpmn:incoming>Flow_2</bpmn:incoming>
      <bpmn:outgoing>Flow_3</bpmn:outgoing>
      <bpmn:outgoing>Flow_4</bpmn:outgoing>
    </bpmn:parallelGateway>
    <bpmn:userTask id="Task_Read" name="Read" rpa:operation="readCell">
      <bpmn:incoming>Flow_3</bpmn:incoming>
      <bpmn:outgoing>Flow_5</bpmn:outgoing>
    </bpmn:userTask>
    <bpmn:subProcess id="Sub_Write" name="Write" rpa:operation="subprocess">
      <bpmn:incoming>Flow_4</bpmn:incoming>
      <bpmn:outgoing>Flow_6</bpmn:outgoing>
      <bpmn:startEvent id="Sub_Start">
        <bpmn:outgoing>Sub_Flow_1</bpmn:outgoing>
      </bpmn:startEvent>
      <bpmn:task id="Task_Write" name="Write cell" rpa:operation="writeCell">
        <bpmn:incoming>Sub_Flow_1</bpmn:incoming>
        <bpmn:outgoing>Sub_Flow_2</bpmn:outgoing>
      </bpmn:task>
      <bpmn:endEvent id="Sub_End">
        <bpmn:incoming>Sub_Flow_2</bpmn:incoming>
      </bpmn:endEvent>
      <bpmn:sequenceFlow id="Sub_Flow_2" sourceRef="Task_Write" targetRef="Sub_End" />
      <bpmn:sequenceFlow id="Sub_Flow_1" sourceRef="Sub_Start" targetRef="Task_Write" />
    </bpmn:subProcess>
    <bpmn:parallelGateway id="Gateway_Join">
      <bpmn:incoming>Flow_5</bpmn:incoming>
      <bpmn:incoming>Flow_6</bpmn:incoming>
      <bpmn:outgoing>Flow_7</bpmn:outgoing>
    </bpmn:parallelGateway>
    <bpmn:endEvent id="EndEvent_1">
      <bpmn:incoming>Flow_7</bpmn:incoming>
    </bpmn:endEvent>
    <bpmn:sequenceFlow id="Flow_4" sourceRef="Gateway_Split" targetRef="Sub_Write" />
    <bpmn:sequenceFlow id="Flow_1" sourceRef="StartEvent_1" targetRef="Task_Open" />
    <bpmn:sequenceFlow id="Flow_2" sourceRef="Task_Open" targetRef="Gateway_Split" />
    <bpmn:sequenceFlow id="Flow_3" sourceRef="Gateway_Split" targetRef="Task_Read" />
    <bpmn:sequenceFlow id="Flow_5" sourceRef="Task_Read" targetRef="Gateway_Join" />
    <bpmn:sequenceFlow id="Flow_6" sourceRef="Sub_Write" targetRef="Gateway_Join" />
    <bpmn:sequenceFlow id="Flow_7" sourceRef="Gateway_Join" targetRef="EndEvent_1" />
  </bpmn:process>
  <bpmndi:BPMNDiagram id="BPMNDiagram_1" />
</bpmn:definitions>
"""


@pytest.fixture
def bpmn_xml():
    return BPMN_XML
