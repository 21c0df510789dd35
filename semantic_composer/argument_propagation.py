from typing import Dict, List
import logging
from .semantics import SemanticItemKind, RELATION_KINDS

logger = logging.getLogger(__name__)


def add_unique(items: list, new_items) -> None:
    for item in new_items:
        if item not in items:
            items.append(item)


class ArgumentPropagator:
    """Decides which semantic items a node exposes to its parent once it has been composed.

    dependency_classes -- the *DependencyClassTable* used to recognise subject dependencies.
    """

    def __init__(self, dependency_classes):
        self.dependency_classes = dependency_classes

    def propagate(
        self,
        node,
        arg_structure: Dict[object, list],
        composed: list,
        child_semantics: list,
        semantic_graph,
    ) -> None:
        """Replaces the contents of *child_semantics*, which holds the items collected from
        the children of *node*, with the items *node* exposes to its parent.

        Args:

        node -- the node that has just been composed.
        arg_structure -- the items collected from each child, keyed by outgoing edge.
        composed -- the relations composed or surfaced at *node*.
        child_semantics -- the items collected from all children of *node*.
        semantic_graph -- the semantic graph being built.
        """
        if len(composed) > 0:
            logger.debug("Node %s will propagate its composed relations.", node.id)
            del child_semantics[:]
            for item in composed:
                if item.kind is SemanticItemKind.CONJUNCTION:
                    add_unique(child_semantics, item.arg_items())
                else:
                    add_unique(child_semantics, [item])
            return
        own_semantics = semantic_graph.semantics_of(node)
        if len(own_semantics) > 0:
            if self._is_unfulfilled(node, semantic_graph):
                logger.debug(
                    "Node %s carries a predicate without relation, will propagate the semantics "
                    "of its children.",
                    node.id,
                )
                return
            del child_semantics[:]
            # a child relation may already take this node's semantics as its argument
            for items in arg_structure.values():
                for item in items:
                    if item.kind in RELATION_KINDS and any(
                        own_item in item.arg_items() for own_item in own_semantics
                    ):
                        add_unique(child_semantics, [item])
            if len(child_semantics) == 0:
                logger.debug("Node %s will propagate its own semantics.", node.id)
                add_unique(child_semantics, own_semantics)
            return
        del child_semantics[:]
        subject_labels: List[str] = []
        if node.is_surface:
            subject_labels = self.dependency_classes.filter_by_dep_class(
                node.category, "SUBJ"
            )
        for edge, items in arg_structure.items():
            # subjects only pass through nodes with a single dependent
            if edge.label not in subject_labels or len(arg_structure) == 1:
                add_unique(child_semantics, items)

    def _is_unfulfilled(self, node, semantic_graph) -> bool:
        if not node.is_surface:
            return False
        has_predicates = any(
            item.kind is SemanticItemKind.PREDICATE for item in node.semantics
        )
        return has_predicates and len(semantic_graph.relations_of(node)) == 0
