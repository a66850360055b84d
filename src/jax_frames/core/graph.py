"""Directed graph substrate shared by the frame graphs.

Vertices carry a name and an opaque payload, edges carry a payload (a pose
for relative-to graphs). Storage is a ``networkx.MultiDiGraph`` keyed by
integer vertex ids; a side index maps names to ids so duplicated names stay
detectable. The graph only grows: there are no removal operations.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List

import networkx as nx


@dataclass(frozen=True)
class Vertex:
    """A named vertex. ``id`` is assigned by :meth:`Graph.add_vertex`."""
    id: int
    name: str
    data: Any = None


@dataclass(frozen=True)
class Edge:
    """A directed edge from ``tail`` to ``head`` (both vertex ids)."""
    id: int
    tail: int
    head: int
    data: Any = None


class Graph:
    """Append-only directed multigraph with named vertices."""

    def __init__(self) -> None:
        self._graph = nx.MultiDiGraph()
        self._names: Dict[str, List[int]] = {}
        self._next_vertex_id = 0
        self._next_edge_id = 0

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, vertex_id: int) -> bool:
        return self._graph.has_node(vertex_id)

    def add_vertex(self, name: str, data: Any = None) -> Vertex:
        """Insert a vertex and return it with its freshly assigned id."""
        vertex = Vertex(self._next_vertex_id, name, data)
        self._next_vertex_id += 1
        self._graph.add_node(vertex.id, vertex=vertex)
        self._names.setdefault(name, []).append(vertex.id)
        return vertex

    def add_edge(self, tail: int, head: int, data: Any = None) -> Edge:
        """Insert a directed edge between two existing vertices.

        Raises:
            KeyError: if either endpoint is not a vertex of this graph
        """
        for vertex_id in (tail, head):
            if vertex_id not in self:
                raise KeyError(f"Vertex id {vertex_id} is not in the graph")
        edge = Edge(self._next_edge_id, tail, head, data)
        self._next_edge_id += 1
        self._graph.add_edge(tail, head, key=edge.id, edge=edge)
        return edge

    def vertex(self, vertex_id: int) -> Vertex:
        """Return the vertex with the given id.

        Raises:
            KeyError: if there is no such vertex
        """
        if vertex_id not in self:
            raise KeyError(f"Vertex id {vertex_id} is not in the graph")
        return self._graph.nodes[vertex_id]["vertex"]

    def vertices(self) -> Iterator[Vertex]:
        """Iterate over all vertices in id order."""
        for vertex_id in sorted(self._graph.nodes):
            yield self._graph.nodes[vertex_id]["vertex"]

    def vertices_named(self, name: str) -> List[Vertex]:
        """All vertices holding ``name``, in insertion order."""
        return [self.vertex(i) for i in self._names.get(name, [])]

    def edges(self) -> List[Edge]:
        """All edges in insertion order."""
        edges = [data["edge"] for _, _, data in self._graph.edges(data=True)]
        return sorted(edges, key=lambda e: e.id)

    def out_edges(self, vertex_id: int) -> List[Edge]:
        edges = [data["edge"] for _, _, data in self._graph.out_edges(vertex_id, data=True)]
        return sorted(edges, key=lambda e: e.id)

    def in_edges(self, vertex_id: int) -> List[Edge]:
        edges = [data["edge"] for _, _, data in self._graph.in_edges(vertex_id, data=True)]
        return sorted(edges, key=lambda e: e.id)

    def out_degree(self, vertex_id: int) -> int:
        return self._graph.out_degree(vertex_id)

    def in_degree(self, vertex_id: int) -> int:
        return self._graph.in_degree(vertex_id)
