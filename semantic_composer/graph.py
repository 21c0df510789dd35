from typing import List, Dict, Optional, Hashable
from collections import deque
from threading import Lock
from .semantics import SpanList
from .errors import DuplicateNodeError, NodeNotFoundError


class Node:
    """A textual unit within a dependency graph.

    Args:

    id -- the stable identifier of the node within its graph, e.g. a token index.
    text -- the surface text of the unit.
    lemma -- the lemma of the head word of the unit. Defaults to the lower-cased text.
    tag -- the fine-grained part-of-speech tag of the head word of the unit, e.g. *VBN*.
    span -- the character span of the unit.
    is_surface -- *False* for artificial nodes, e.g. a dummy root, that do not correspond to
        text and never compose.
    """

    def __init__(
        self,
        id: Hashable,
        text: str = "",
        lemma: Optional[str] = None,
        tag: str = "",
        span: Optional[SpanList] = None,
        is_surface: bool = True,
    ):
        self.id = id
        self.text = text
        self.lemma = lemma if lemma is not None else text.lower()
        self.tag = tag
        self.span = span
        self.is_surface = is_surface
        # entities, predicates and relations attached upstream
        self.semantics: list = []

    @property
    def category(self) -> str:
        """The coarse lexical category, e.g. *VB* for *VBN*."""
        return self.tag[:2]

    @property
    def is_verbal(self) -> bool:
        return self.category == "VB"

    @property
    def is_adverbial(self) -> bool:
        """*True* for *RB*, *RBR* and *RBS*, which share the category *RB*."""
        return self.category == "RB"

    def contains_lemma(self, lemma: str) -> bool:
        return lemma == self.lemma or lemma in self.lemma.split()

    def __str__(self) -> str:
        return "".join((str(self.id), ":", self.text, "/", self.tag))


class DependencyEdge:
    """A labelled dependency from a governor node to a dependent node."""

    def __init__(self, parent_id: Hashable, child_id: Hashable, label: str):
        self.parent_id = parent_id
        self.child_id = child_id
        self.label = label

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, DependencyEdge)
            and self.parent_id == other.parent_id
            and self.child_id == other.child_id
            and self.label == other.label
        )

    def __hash__(self) -> int:
        return hash((self.parent_id, self.child_id, self.label))

    def __str__(self) -> str:
        """e.g. *2-nsubj->1*"""
        return "".join(
            (str(self.parent_id), "-", self.label, "->", str(self.child_id))
        )

    def __repr__(self) -> str:
        return str(self)


class DependencyGraph:
    """The normalized dependency graph of one sentence, with nodes addressed by id.

    Edges are not guaranteed to be acyclic. Code that rewrites the edges of a graph while
    it may be composed on another thread must hold *lock*.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self._nodes: Dict[Hashable, Node] = {}
        self._outgoing: Dict[Hashable, List[DependencyEdge]] = {}
        self._incoming: Dict[Hashable, List[DependencyEdge]] = {}
        self.lock = Lock()

    def add_node(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise DuplicateNodeError(
                " ".join(("Node", str(node.id), "already exists in graph", self.label))
            )
        self._nodes[node.id] = node
        self._outgoing[node.id] = []
        self._incoming[node.id] = []
        return node

    def add_edge(self, parent_id: Hashable, child_id: Hashable, label: str) -> DependencyEdge:
        for node_id in (parent_id, child_id):
            if node_id not in self._nodes:
                raise NodeNotFoundError(
                    " ".join(("Node", str(node_id), "not found in graph", self.label))
                )
        edge = DependencyEdge(parent_id, child_id, label)
        if edge not in self._outgoing[parent_id]:
            self._outgoing[parent_id].append(edge)
            self._incoming[child_id].append(edge)
        return edge

    def remove_edge(self, edge: DependencyEdge) -> None:
        if edge in self._outgoing.get(edge.parent_id, []):
            self._outgoing[edge.parent_id].remove(edge)
            self._incoming[edge.child_id].remove(edge)

    def has_node(self, node_id: Hashable) -> bool:
        return node_id in self._nodes

    def node(self, node_id: Hashable) -> Node:
        if node_id not in self._nodes:
            raise NodeNotFoundError(
                " ".join(("Node", str(node_id), "not found in graph", self.label))
            )
        return self._nodes[node_id]

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def outgoing_edges(self, node_id: Hashable) -> List[DependencyEdge]:
        self.node(node_id)
        return list(self._outgoing[node_id])

    def incoming_edges(self, node_id: Hashable) -> List[DependencyEdge]:
        self.node(node_id)
        return list(self._incoming[node_id])

    def successors(self, node_id: Hashable) -> List[Node]:
        successors: List[Node] = []
        for edge in self.outgoing_edges(node_id):
            child = self._nodes[edge.child_id]
            if child not in successors:
                successors.append(child)
        return successors

    def is_leaf(self, node_id: Hashable) -> bool:
        return len(self.outgoing_edges(node_id)) == 0

    def roots(self) -> List[Node]:
        """The nodes without incoming edges, in insertion order."""
        return [
            node for node in self._nodes.values() if len(self._incoming[node.id]) == 0
        ]

    def dependency_path(
        self, from_id: Hashable, to_id: Hashable
    ) -> Optional[List[DependencyEdge]]:
        """Returns the shortest directed chain of edges leading from one node to another,
        an empty list if the two ids are the same, or *None* if there is no such chain."""
        self.node(from_id)
        if from_id == to_id:
            return []
        previous_edges: Dict[Hashable, DependencyEdge] = {}
        queue = deque([from_id])
        visited = {from_id}
        while len(queue) > 0:
            current_id = queue.popleft()
            for edge in self._outgoing[current_id]:
                if edge.child_id in visited:
                    continue
                visited.add(edge.child_id)
                previous_edges[edge.child_id] = edge
                if edge.child_id == to_id:
                    path = [edge]
                    while path[0].parent_id != from_id:
                        path.insert(0, previous_edges[path[0].parent_id])
                    return path
                queue.append(edge.child_id)
        return None

    def __len__(self) -> int:
        return len(self._nodes)
