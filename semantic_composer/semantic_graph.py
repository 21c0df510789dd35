from typing import List, Dict, Optional, Hashable, Iterable
from itertools import count
from .semantics import (
    Entity,
    Predicate,
    Predication,
    Conjunction,
    Argument,
    Sense,
    SpanList,
    ScalarModalityValue,
    SemanticItemKind,
    RELATION_KINDS,
)
from .errors import ForeignPredicationError, ComposerError

# shared between graphs so that identifiers are unique within a process
_identifier_counter = count(1)


def _next_identifier(prefix: str) -> str:
    return "".join((prefix, str(next(_identifier_counter))))


class SemanticGraph:
    """Holds the entities and predications composed for one document.

    The graph creates all semantic items and owns the predications it creates: their scalar
    values and sources may only be changed via *set_scalar_values()* and *set_sources()* on
    the owning graph.

    Relations are indexed by the *Node* objects they were composed on, so the graphs of
    several sentences can be composed into one semantic graph even though their node ids
    overlap.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self._items: Dict[str, object] = {}
        self._relations_by_node: Dict[object, list] = {}

    def new_entity(
        self,
        type: str,
        span: Optional[SpanList] = None,
        text: str = "",
        node_id: Hashable = None,
    ) -> Entity:
        entity = Entity(_next_identifier("T"), type, span, text, node_id)
        self._items[entity.id] = entity
        return entity

    def new_predicate(
        self,
        type: str,
        span: Optional[SpanList] = None,
        text: str = "",
        node_id: Hashable = None,
        tag: str = "",
        sense: Optional[Sense] = None,
    ) -> Predicate:
        predicate = Predicate(_next_identifier("T"), type, span, text, node_id, tag, sense)
        self._items[predicate.id] = predicate
        return predicate

    def new_predication(
        self, predicate: Predicate, arguments: Iterable[Argument], node=None
    ) -> Predication:
        """Args:

        predicate -- the predicate of the new predication.
        arguments -- the arguments of the new predication.
        node -- the *Node* the predication is composed on, or *None* if it is not to be
            found via *relations_of()*.
        """
        return self._register_relation(
            Predication(_next_identifier("E"), predicate, arguments, self), node
        )

    def new_conjunction(
        self, predicate: Predicate, arguments: Iterable[Argument], node=None
    ) -> Conjunction:
        arguments = list(arguments)
        if any(argument.role != "CC" for argument in arguments):
            raise ComposerError("All arguments of a conjunction must have the role CC")
        return self._register_relation(
            Conjunction(_next_identifier("E"), predicate, arguments, self), node
        )

    def _register_relation(self, relation: Predication, node) -> Predication:
        self._items[relation.id] = relation
        if node is not None:
            self._relations_by_node.setdefault(node, []).append(relation)
        return relation

    def add(self, item) -> None:
        """Registers an item created elsewhere, e.g. an entity shared between documents."""
        if item.id not in self._items:
            self._items[item.id] = item

    def get(self, id: str):
        return self._items.get(id)

    def __contains__(self, item) -> bool:
        return self._items.get(item.id) is item

    def items(self, kind: Optional[SemanticItemKind] = None) -> list:
        if kind is None:
            return list(self._items.values())
        return [item for item in self._items.values() if item.kind is kind]

    def entities(self) -> List[Entity]:
        return self.items(SemanticItemKind.ENTITY)

    def predications(self) -> List[Predication]:
        """All relations, conjunctions included, in order of creation."""
        return [item for item in self._items.values() if item.kind in RELATION_KINDS]

    def items_in_span(self, span: SpanList) -> list:
        return [
            item
            for item in self._items.values()
            if item.span is not None and span.subsumes(item.span)
        ]

    def predications_with_predicate(self, predicate: Predicate) -> List[Predication]:
        return [
            relation
            for relation in self.predications()
            if relation.predicate is predicate
        ]

    def relations_of(self, node) -> list:
        """The relations triggered by predicates on *node*, including relations attached to
        the node upstream."""
        relations = [item for item in node.semantics if item.kind in RELATION_KINDS]
        for relation in self._relations_by_node.get(node, []):
            if relation not in relations:
                relations.append(relation)
        return relations

    def semantics_of(self, node) -> list:
        """The items attached to *node* together with the relations it triggers."""
        semantics = list(node.semantics)
        for relation in self._relations_by_node.get(node, []):
            if relation not in semantics:
                semantics.append(relation)
        return semantics

    def _check_owner(self, predication: Predication) -> None:
        if predication.owner is not self:
            raise ForeignPredicationError(
                " ".join(
                    (
                        "Predication",
                        predication.id,
                        "is not owned by semantic graph",
                        self.label,
                    )
                )
            )

    def set_scalar_values(
        self, predication: Predication, scalar_values: List[ScalarModalityValue]
    ) -> None:
        self._check_owner(predication)
        predication._scalar_values = list(scalar_values)

    def replace_scalar_value(
        self,
        predication: Predication,
        old_value: ScalarModalityValue,
        new_value: ScalarModalityValue,
    ) -> None:
        """Replaces the entries equal to *old_value*, leaving the other entries in place."""
        self._check_owner(predication)
        predication._scalar_values = [
            new_value if value == old_value else value
            for value in predication._scalar_values
        ]

    def set_sources(self, predication: Predication, sources: list) -> None:
        self._check_owner(predication)
        predication._sources = list(sources)

    def __len__(self) -> int:
        return len(self._items)
