import logging
from typing import List

import graphviz
import networkx as nx

from .cwlwalk_types import (BEGIN_KEY, END_KEY, NODE_PREFIX, Cwl, Json, RunTargetType,
                            ToolInfo, WalkResult)
from .docker import get_specifier_name
from .utils import as_list
from .walker import process_dependencies

logger = logging.getLogger('cwlwalk.graphs')


def add_synthetic_nodes(workflow: Cwl, result: WalkResult) -> None:
    """Stitches the synthetic begin and end nodes into the (DAG mode) results of a walk.

    The end node depends on the steps which the workflow outputs: come from, and
    every top-level step without any recorded dependencies depends on the begin node.

    Args:
        workflow (Cwl): The expanded root CWL Workflow
        result (WalkResult): The results of walking workflow. Mutated in place.
    """
    end_dependencies: List[str] = []
    for output in as_list(workflow.get('outputs'), 'id', 'type'):
        if isinstance(output, dict):
            process_dependencies(end_dependencies, output.get('outputSource'))
    result.tool_info[END_KEY] = ToolInfo(None, end_dependencies)
    result.node_pairs.append((END_KEY, ''))

    for (node, _) in result.node_pairs:
        if node not in result.tool_info:
            result.tool_info[node] = ToolInfo(None, [BEGIN_KEY])
    result.node_pairs.append((BEGIN_KEY, ''))


def build_dag(result: WalkResult) -> nx.DiGraph:
    """Builds the step dependency graph of a (stitched) walk.

    Dependencies on steps which do not exist (i.e. a source: with a typo) are dropped.
    Every real step is guaranteed at least one inbound edge (possibly from the begin node)
    and at least one outbound edge (possibly to the end node), so the graph is always renderable.

    Args:
        result (WalkResult): The results of walking the workflow, after add_synthetic_nodes()

    Returns:
        nx.DiGraph: The DAG. Each node has name, run, type, docker, and tool attributes.
    """
    graph_nx = nx.DiGraph()
    for (node, docker_url) in result.node_pairs:
        docker_info = result.node_docker_info.get(node)
        step_type = result.step_to_type.get(node, RunTargetType.NOT_APPLICABLE)
        graph_nx.add_node(node,
                          name=node[len(NODE_PREFIX):] if node.startswith(NODE_PREFIX) else node,
                          run=docker_info.run_path if docker_info else '',
                          type=step_type.value,
                          docker=(docker_info.docker_pull or '') if docker_info else '',
                          tool=docker_url or '')

    for (node, tool_info) in result.tool_info.items():
        if node not in graph_nx:
            continue
        for dependency in tool_info.dependency_ids:
            if dependency not in graph_nx:
                logger.debug(f'Ignoring dependency of {node} on unknown step {dependency}')
                continue
            graph_nx.add_edge(dependency, node)

    real_nodes = [node for node in graph_nx.nodes if node not in (BEGIN_KEY, END_KEY)]
    for node in real_nodes:
        if graph_nx.in_degree(node) == 0:
            graph_nx.add_edge(BEGIN_KEY, node)
        if graph_nx.out_degree(node) == 0:
            graph_nx.add_edge(node, END_KEY)
    return graph_nx


def dag_to_cytoscape(graph_nx: nx.DiGraph) -> Json:
    """Converts a DAG into cytoscape json format.

    Args:
        graph_nx (nx.DiGraph): A DAG returned by build_dag()

    Returns:
        Json: A Json object compatible with cytoscape.
    """
    nodes = []
    for (node, attrs) in graph_nx.nodes(data=True):
        nodes.append({'data': {'id': node, **attrs}})
    edges = []
    for (node1, node2) in graph_nx.edges:
        edges.append({'data': {'source': node1, 'target': node2, 'id': f'{node1}_{node2}'}})
    return {'nodes': nodes, 'edges': edges}


def dag_to_graphviz(graph_nx: nx.DiGraph, name: str) -> graphviz.Digraph:
    """Converts a DAG into a GraphViz DiGraph. Call .render() or .save() on the result.

    Args:
        graph_nx (nx.DiGraph): A DAG returned by build_dag()
        name (str): The name of the graph

    Returns:
        graphviz.Digraph: The graph, with tool steps in blue and subworkflows in yellow
    """
    graph_gv = graphviz.Digraph(name=name)
    graph_gv.attr(bgcolor="transparent")  # Useful for making slides
    graph_gv.attr(rankdir='TB')
    attrs = {'shape': 'box', 'style': 'rounded, filled'}
    colors = {RunTargetType.TOOL.value: 'lightblue',
              RunTargetType.WORKFLOW.value: 'lightyellow',
              RunTargetType.EXPRESSION_TOOL.value: 'lightgreen'}
    for (node, node_attrs) in graph_nx.nodes(data=True):
        if node in (BEGIN_KEY, END_KEY):
            graph_gv.node(node, label='', shape='circle', style='filled', fillcolor='black', width='0.2')
        else:
            graph_gv.node(node, label=node_attrs['name'],
                          fillcolor=colors.get(node_attrs['type'], 'lightgray'), **attrs)
    for (node1, node2) in graph_nx.edges:
        graph_gv.edge(node1, node2)
    return graph_gv


def tool_table(result: WalkResult) -> List[Json]:
    """Lists the CommandLineTool steps (at every depth) and their docker images.

    Args:
        result (WalkResult): The results of walking the workflow (in either mode)

    Returns:
        List[Json]: One row per tool step, sorted by id
    """
    rows = []
    for (step_id, docker_info) in result.node_docker_info.items():
        if result.step_to_type.get(step_id) != RunTargetType.TOOL:
            continue
        docker_pull = docker_info.docker_pull or ''
        specifier = docker_info.specifier
        rows.append({'id': step_id[len(NODE_PREFIX):] if step_id.startswith(NODE_PREFIX) else step_id,
                     'file': docker_info.run_path,
                     'docker': docker_pull,
                     'link': docker_info.docker_url or '',
                     'specifier': specifier.value if specifier else '',
                     'version': get_specifier_name(docker_pull, specifier) if specifier else ''})
    return sorted(rows, key=lambda row: row['id'])

