from typing import List, Dict, Set, Optional, Hashable
from itertools import product
import logging
from .semantics import (
    Argument,
    Predicate,
    Predication,
    SemanticItemKind,
    RELATION_KINDS,
    GENERIC,
    NEGATOR,
)
from .argument_propagation import add_unique

logger = logging.getLogger(__name__)

# verbal lemmas that may intervene between an adverbial or modal predicate and its argument
TRANSPARENT_VERBAL_LEMMAS = ("associate", "have")


def generate_permutations(groups: List[list]) -> List[list]:
    """Returns every combination that takes exactly one element from each group, e.g.
    *[[a, b], [c]]* yields *[[a, c], [b, c]]*."""
    if len(groups) == 0:
        return []
    return [list(combination) for combination in product(*groups)]


def invert(arguments: List[Argument]) -> List[Argument]:
    """Swaps the roles of the first *SUBJ* and the first *COMP* argument."""
    roles = [argument.role for argument in arguments]
    inverted = list(arguments)
    if "SUBJ" in roles:
        subject_index = roles.index("SUBJ")
        inverted[subject_index] = arguments[subject_index].with_role("COMP")
    if "COMP" in roles:
        comp_index = roles.index("COMP")
        inverted[comp_index] = arguments[comp_index].with_role("SUBJ")
    return inverted


class ArgumentIdentifier:
    """Traverses a dependency graph depth-first, composing predications from the predicates
    attached to each node and the semantics collected from its dependents.

    Args:

    argument_rules -- the *ArgumentRuleTable*.
    dependency_classes -- the *DependencyClassTable*.
    categorization -- the *EmbeddingCategorization*.
    relation_definitions -- the *RelationDefinitionRegistry*.
    scalar_modality_composer -- the *ScalarModalityComposer* run on each new predication.
    source_propagator -- the *SourcePropagator* run on each new predication.
    argument_propagator -- the *ArgumentPropagator* deciding what each node exposes.
    """

    def __init__(
        self,
        argument_rules,
        dependency_classes,
        categorization,
        relation_definitions,
        scalar_modality_composer,
        source_propagator,
        argument_propagator,
    ):
        self.argument_rules = argument_rules
        self.dependency_classes = dependency_classes
        self.categorization = categorization
        self.relation_definitions = relation_definitions
        self.scalar_modality_composer = scalar_modality_composer
        self.source_propagator = source_propagator
        self.argument_propagator = argument_propagator

    def identify(
        self,
        node,
        graph,
        semantic_graph,
        *,
        create_generic: bool = False,
        create_if_exists: bool = False,
        ancestor_ids: Optional[Set[Hashable]] = None
    ) -> list:
        """Composes the predications rooted at *node* and returns the semantic items *node*
        exposes to its governor.

        Args:

        node -- the node to start from.
        graph -- the *DependencyGraph* containing *node*.
        semantic_graph -- the *SemanticGraph* receiving the new items.
        create_generic -- *True* if a *GENERIC* predicate is to be synthesized on nodes
            without semantics that have dependents with semantics.
        create_if_exists -- *True* if new predications are to be composed on nodes that already
            carry relations.
        ancestor_ids -- the ids of the nodes on the path from the starting node, used to detect
            cycles.
        """
        logger.debug("Examining node %s for argument identification.", node.id)
        if graph.is_leaf(node.id):
            return self._leaf_semantics(node, semantic_graph, create_if_exists)
        if ancestor_ids is None:
            ancestor_ids = set()
        ancestor_ids.add(node.id)
        try:
            arg_structure: Dict[object, list] = {}
            all_child_semantics: list = []
            for edge in graph.outgoing_edges(node.id):
                if edge.child_id in ancestor_ids:
                    logger.error(
                        "Cycle detected from node %s via edge %s. Ignoring the edge.",
                        node.id,
                        edge,
                    )
                    continue
                child_semantics = self.identify(
                    graph.node(edge.child_id),
                    graph,
                    semantic_graph,
                    create_generic=create_generic,
                    create_if_exists=create_if_exists,
                    ancestor_ids=ancestor_ids,
                )
                if len(child_semantics) == 0:
                    logger.debug("No semantics found via edge %s.", edge)
                    continue
                arg_structure[edge] = child_semantics
                add_unique(all_child_semantics, child_semantics)
            composed = self._compose(
                node,
                graph,
                arg_structure,
                semantic_graph,
                create_generic,
                create_if_exists,
            )
            for item in composed:
                logger.debug("Composed semantic item from node %s: %s.", node.id, item)
            self.argument_propagator.propagate(
                node, arg_structure, composed, all_child_semantics, semantic_graph
            )
            return all_child_semantics
        finally:
            ancestor_ids.discard(node.id)

    def _leaf_semantics(self, node, semantic_graph, create_if_exists: bool) -> list:
        exposed: list = []
        has_predicates = False
        for item in node.semantics:
            if item.kind is SemanticItemKind.ENTITY:
                semantic_graph.add(item)
                exposed.append(item)
            elif item.kind is SemanticItemKind.PREDICATE:
                has_predicates = True
        if has_predicates and not create_if_exists:
            for relation in semantic_graph.relations_of(node):
                semantic_graph.add(relation)
                add_unique(exposed, [relation])
        if len(exposed) == 0:
            logger.debug("Leaf node %s has no semantics.", node.id)
        return exposed

    def _compose(
        self,
        node,
        graph,
        arg_structure: Dict[object, list],
        semantic_graph,
        create_generic: bool,
        create_if_exists: bool,
    ) -> list:
        if not node.is_surface:
            logger.debug("Node %s is not a textual unit. Skipping composition.", node.id)
            return []
        composed: list = []
        if len(semantic_graph.semantics_of(node)) == 0:
            if create_generic and len(arg_structure) > 0:
                predicate = semantic_graph.new_predicate(
                    GENERIC, node.span, node.text, node.id, node.tag
                )
                add_unique(
                    composed,
                    self._compose_predications(node, graph, predicate, arg_structure, semantic_graph),
                )
            return composed
        relations = semantic_graph.relations_of(node)
        if not create_if_exists and len(relations) > 0:
            for relation in relations:
                semantic_graph.add(relation)
                add_unique(composed, [relation])
                add_unique(
                    composed,
                    self._handle_negated_arguments(
                        relation, graph, arg_structure, semantic_graph
                    ),
                )
            return composed
        if len(arg_structure) == 0:
            return composed
        predicates = [
            item for item in node.semantics if item.kind is SemanticItemKind.PREDICATE
        ]
        predicates.sort(
            key=lambda predicate: predicate.span.length if predicate.span is not None else 0,
            reverse=True,
        )
        covered = []
        for predicate in predicates:
            if predicate.span is not None and any(
                covered_span.subsumes(predicate.span) for covered_span in covered
            ):
                logger.warning(
                    "Skipping predicate %s in composition, because it is subsumed by a larger unit.",
                    predicate.id,
                )
                continue
            predications = self._compose_predications(
                node, graph, predicate, arg_structure, semantic_graph
            )
            if len(predications) == 0:
                continue
            add_unique(composed, predications)
            if predicate.span is not None:
                covered.append(predicate.span)
        return composed

    def _resolve_role(self, node, predicate: Predicate, label: str):
        """Returns the role for a dependency of *node* together with a flag indicating
        whether the role was assigned from the embedding types of the predicate's sense."""
        sense = predicate.sense
        embedding_types = sense.embedding_types if sense is not None else None
        if self.dependency_classes.in_class(node.category, label, embedding_types):
            logger.debug(
                "Dictionary composition rule COMP applies to %s_%s_%s.",
                node.lemma,
                node.category,
                label,
            )
            return "COMP", True
        rule = self.argument_rules.find_matching_rule(
            label,
            node.lemma,
            node.category,
            embedding_types,
            preferred_rules=sense.argument_rules if sense is not None else None,
        )
        if rule is None:
            logger.debug(
                "No composition rule found for %s_%s_%s.", node.lemma, node.category, label
            )
            return label, False
        return rule.argument_type, False

    def _compose_predications(
        self,
        node,
        graph,
        predicate: Predicate,
        arg_structure: Dict[object, list],
        semantic_graph,
    ) -> List[Predication]:
        definition = self.relation_definitions.lookup(predicate.type)
        if definition is None:
            logger.debug("No relation definition for predicate %s.", predicate)
            return []
        arguments: List[Argument] = []
        inverse = False
        for edge, items in arg_structure.items():
            role, from_sense = self._resolve_role(node, predicate, edge.label)
            if from_sense and predicate.sense is not None and predicate.sense.inverse:
                inverse = True
            for item in items:
                if not self._satisfies_path_requirement(node, item, graph):
                    logger.debug(
                        "Item %s is not accessible from predicate %s.", item.id, predicate.id
                    )
                    continue
                if not definition.arg_satisfies_role(role, item):
                    logger.debug(
                        "Item %s does not satisfy role %s of %s.", item.id, role, definition
                    )
                    continue
                arguments.append(Argument(role, item))
        if len(arguments) == 0:
            logger.debug("No argument found for composition at node %s.", node.id)
            return []
        if inverse:
            arguments = invert(arguments)
        predications: List[Predication] = []
        violating_roles = definition.violates_multiple_role_constraint(arguments)
        if len(violating_roles) == 0:
            if definition.core_args_resolved(arguments):
                predications.extend(
                    self._instantiate(
                        node, predicate, arguments, graph, arg_structure, semantic_graph
                    )
                )
            return predications
        groups = []
        others = list(arguments)
        for role in violating_roles:
            group = [argument for argument in arguments if argument.role == role]
            groups.append(group)
            others = [argument for argument in others if argument not in group]
        propagated: Set[Argument] = set()
        for permutation in generate_permutations(groups):
            permutation_arguments = permutation + others
            if not definition.core_args_resolved(permutation_arguments):
                continue
            # scalar values only flow once through each argument
            propagate_scalar = propagated.isdisjoint(permutation_arguments)
            if propagate_scalar:
                propagated.update(permutation_arguments)
            predications.extend(
                self._instantiate(
                    node,
                    predicate,
                    permutation_arguments,
                    graph,
                    arg_structure,
                    semantic_graph,
                    propagate_scalar=propagate_scalar,
                )
            )
        return predications

    def _instantiate(
        self,
        node,
        predicate: Predicate,
        arguments: List[Argument],
        graph,
        arg_structure: Dict[object, list],
        semantic_graph,
        propagate_scalar: bool = True,
    ) -> List[Predication]:
        predication = semantic_graph.new_predication(predicate, arguments, node)
        logger.debug("Created predication %s.", predication)
        self.source_propagator.initialize_sources(predication, graph, semantic_graph)
        if propagate_scalar:
            self.scalar_modality_composer.propagate(predication, semantic_graph)
        self.source_propagator.propagate(predication, semantic_graph)
        return [predication] + self._handle_negated_arguments(
            predication, graph, arg_structure, semantic_graph
        )

    def _satisfies_path_requirement(self, node, item, graph) -> bool:
        node_id = item.node_id
        if node_id is None or not graph.has_node(node_id):
            return True
        path = graph.dependency_path(node.id, node_id)
        if path is None:
            return False
        if not (node.is_adverbial or node.category.startswith("MD")):
            return True
        for edge in path[:-1]:
            intervening = graph.node(edge.child_id)
            if intervening.is_verbal and not any(
                intervening.contains_lemma(lemma) for lemma in TRANSPARENT_VERBAL_LEMMAS
            ):
                return False
        return True

    def _negating_predicate(self, node) -> Optional[Predicate]:
        for item in node.semantics:
            if item.kind is SemanticItemKind.PREDICATE and item.type == NEGATOR:
                return item
        return None

    def _collect_negated(
        self, node, graph, reachable: list, negator_nodes: list, seen: Set[Hashable]
    ) -> None:
        if node.id in seen:
            return
        seen.add(node.id)
        negator = self._negating_predicate(node)
        if negator is None:
            if len(negator_nodes) > 0 and node not in reachable:
                reachable.append(node)
            return
        negator_nodes.append(node)
        for successor in graph.successors(node.id):
            self._collect_negated(successor, graph, reachable, negator_nodes, seen)

    def _handle_negated_arguments(
        self, relation, graph, arg_structure: Dict[object, list], semantic_graph
    ) -> List[Predication]:
        """Wraps *relation* in a predication of each negator that governs one of its
        arguments, e.g. *not* in *not X but Y*."""
        negated: List[Predication] = []
        if relation.kind not in RELATION_KINDS:
            return negated
        arg_items = relation.arg_items()
        for edge in arg_structure:
            reachable: list = []
            negator_nodes: list = []
            self._collect_negated(graph.node(edge.child_id), graph, reachable, negator_nodes, set())
            for successor in reachable:
                if not any(
                    item in arg_items for item in semantic_graph.semantics_of(successor)
                ):
                    continue
                predication = semantic_graph.new_predication(
                    self._negating_predicate(negator_nodes[0]),
                    [Argument("COMP", relation)],
                    negator_nodes[0],
                )
                logger.debug(
                    "Created predication %s negating %s.", predication.id, relation.id
                )
                self.source_propagator.initialize_sources(predication, graph, semantic_graph)
                self.scalar_modality_composer.propagate(predication, semantic_graph)
                self.source_propagator.propagate(predication, semantic_graph)
                negated.append(predication)
        return negated
