from typing import List, Iterable
import logging
from .semantics import Predication, SOURCE_WRITER, SOURCE_GENERIC, GENERIC, RELATION_KINDS
from .rules import SCOPE_ARGUMENT_TYPES

logger = logging.getLogger(__name__)

# labels of agent dependencies that make a passive predicate attribute its content
AGENT_LABELS = ("prep_by", "prepc_by")


class SourcePropagator:
    """Determines who asserts an epistemic or evidential predication and attributes the
    predications in its scope to the same sources.

    Args:

    categorization -- the *EmbeddingCategorization*.
    scope_argument_types -- the argument roles through which scope extends.
    introducing_tags -- the tags of predicates that introduce a source of their own even
        without a *SUBJ* argument, e.g. *VBN* for *it was shown that ...*.
    """

    def __init__(
        self,
        categorization,
        scope_argument_types: Iterable[str] = SCOPE_ARGUMENT_TYPES,
        introducing_tags: Iterable[str] = ("VBN",),
    ):
        self.categorization = categorization
        self.scope_argument_types = tuple(scope_argument_types)
        self.introducing_tags = tuple(introducing_tags)

    def initialize_sources(self, predication: Predication, graph, semantic_graph) -> None:
        """Sets the initial sources of a newly created epistemic or evidential predication:
        a generic source for agentless passives, otherwise the *SUBJ* arguments, otherwise
        whatever the subject dependent of a verbal predicate denotes."""
        if not self.categorization.is_epistemic_scalar(predication.type):
            return
        node = None
        node_id = predication.node_id
        if node_id is not None and graph.has_node(node_id):
            node = graph.node(node_id)
        if node is not None and node.is_verbal:
            generic_source = self._generic_source(node, graph, semantic_graph)
            if generic_source is not None:
                semantic_graph.set_sources(predication, [generic_source])
                return
        subjects = predication.arg_items("SUBJ")
        if len(subjects) > 0:
            semantic_graph.set_sources(predication, subjects)
            return
        if node is None or not node.is_verbal:
            return
        for edge in graph.outgoing_edges(node.id):
            if not edge.label.endswith("subj"):
                continue
            dependent = graph.node(edge.child_id)
            relations = semantic_graph.relations_of(dependent)
            if len(relations) > 0:
                sources = relations
            elif len(dependent.semantics) > 0:
                sources = list(dependent.semantics)
            else:
                sources = [
                    semantic_graph.new_entity(
                        GENERIC, dependent.span, dependent.text, dependent.id
                    )
                ]
            semantic_graph.set_sources(predication, sources)
            return

    def _generic_source(self, node, graph, semantic_graph):
        edges = graph.outgoing_edges(node.id)
        has_agent = any(edge.label in AGENT_LABELS for edge in edges)
        generic_source = None
        for edge in edges:
            if not edge.label.endswith("subjpass"):
                continue
            dependent = graph.node(edge.child_id)
            if dependent.lemma == "it" or not has_agent:
                generic_source = semantic_graph.new_entity(
                    SOURCE_GENERIC, dependent.span, dependent.text, dependent.id
                )
        return generic_source

    def introduces_source(self, predication: Predication) -> bool:
        if len(predication.args("SUBJ")) > 0:
            return True
        predicate = predication.predicate
        return predicate is not None and predicate.tag in self.introducing_tags

    def propagate(self, predication: Predication, semantic_graph) -> None:
        if not self.categorization.is_epistemic_scalar(predication.type):
            return
        logger.debug(
            "Predication %s has %d sources.", predication.id, len(predication.sources)
        )
        self._propagate_influence(predication, list(predication.sources), 0, semantic_graph)

    def _scope_children(self, predication: Predication, level: int) -> List[Predication]:
        children: List[Predication] = []
        for argument in predication.arguments:
            if argument.item.kind not in RELATION_KINDS:
                continue
            if level > 0 or argument.role in self.scope_argument_types:
                if argument.item not in children:
                    children.append(argument.item)
        return children

    def _propagate_influence(
        self, current: Predication, sources: list, level: int, semantic_graph
    ) -> None:
        if not self.categorization.is_epistemic_scalar(current.type):
            return
        children = self._scope_children(current, level)
        if len(children) == 0:
            logger.debug("Predication %s has no predications in scope.", current.id)
            return
        for child in children:
            if any(item in sources for item in child.arg_items()):
                logger.debug(
                    "Predication %s in scope of %s states its own source.",
                    child.id,
                    current.id,
                )
                continue
            if self.categorization.is_epistemic_scalar(
                child.type
            ) and self.introduces_source(child):
                logger.debug(
                    "Predication %s in scope of %s introduces another source.",
                    child.id,
                    current.id,
                )
                continue
            if child in sources:
                child_sources = [source for source in sources if source is not child]
                if len(child_sources) == 0:
                    child_sources = [SOURCE_WRITER]
            else:
                child_sources = sources
            if child.owner is not semantic_graph:
                logger.debug(
                    "Predication %s in scope of %s belongs to semantic graph %s.",
                    child.id,
                    current.id,
                    child.owner.label,
                )
            child.owner.set_sources(child, child_sources)
            self._propagate_influence(child, child_sources, level + 1, semantic_graph)
