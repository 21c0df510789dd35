import unittest
import semantic_composer
from semantic_composer import (
    Node,
    DependencyGraph,
    SemanticGraph,
    Sense,
    RelationArgument,
    RelationDefinition,
    SemanticItemKind,
)
from semantic_composer.semantics import Argument, span, GENERIC
from semantic_composer.rules import ArgumentRule
from semantic_composer.argument_identification import generate_permutations, invert

ENTITY_KINDS = [SemanticItemKind.ENTITY]

relation_definitions = [
    RelationDefinition(
        "INTERACT",
        [RelationArgument("SUBJ", ENTITY_KINDS), RelationArgument("COMP", ENTITY_KINDS)],
    ),
    RelationDefinition(
        "TREAT",
        [
            RelationArgument("SUBJ", ENTITY_KINDS, ["DRUG"]),
            RelationArgument("THEME", ENTITY_KINDS, ["DISEASE"]),
        ],
    ),
]
manager = semantic_composer.Manager(
    relation_definitions=relation_definitions, number_of_workers=1
)
generic_manager = semantic_composer.Manager(
    relation_definitions=relation_definitions
    + [
        RelationDefinition(
            GENERIC,
            [RelationArgument("SUBJ", ENTITY_KINDS)],
            [RelationArgument("prep_with", ENTITY_KINDS)],
        )
    ],
    create_generic=True,
    number_of_workers=1,
)
if_exists_manager = semantic_composer.Manager(
    relation_definitions=relation_definitions, create_if_exists=True, number_of_workers=1
)

interact = Sense("INTERACT", pos="VB")
negator = Sense("NEGATOR", embedding_types=["NEG"], pos="RB")
treat = Sense(
    "TREAT", pos="VB", argument_rules=[ArgumentRule("OBJ", "VB", "THEME")]
)


def add_word(
    graph, semantic_graph, index, text, tag, lemma=None, sense=None, entity_type=None
):
    node = graph.add_node(
        Node(index, text, lemma, tag, span(index * 10, index * 10 + len(text)))
    )
    if entity_type is not None:
        node.semantics.append(
            semantic_graph.new_entity(entity_type, node.span, text, index)
        )
    if sense is not None:
        node.semantics.append(
            semantic_graph.new_predicate(
                sense.category, node.span, text, index, tag, sense
            )
        )
    return node


def entity_of(node):
    return node.semantics[0]


class ArgumentIdentificationTest(unittest.TestCase):
    def setUp(self):
        self.graph = DependencyGraph("test")
        self.semantic_graph = SemanticGraph("test")

    def add_word(self, *args, **kwargs):
        return add_word(self.graph, self.semantic_graph, *args, **kwargs)

    def binding_graph(self):
        smad3 = self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "binds", "VBZ", "bind", interact)
        smad4 = self.add_word(2, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "dobj")
        return entity_of(smad3), entity_of(smad4)

    def test_simple_predication(self):
        smad3, smad4 = self.binding_graph()
        manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 1)
        self.assertEqual(predications[0].type, "INTERACT")
        self.assertEqual(predications[0].arg_items("SUBJ"), [smad3])
        self.assertEqual(predications[0].arg_items("COMP"), [smad4])
        self.assertEqual(manager.factuality(predications[0]), "Fact")

    def test_compose_creates_semantic_graph(self):
        self.binding_graph()
        semantic_graph = manager.compose(self.graph)
        self.assertEqual(semantic_graph.label, "test")
        self.assertEqual(len(semantic_graph.predications()), 1)

    def test_negation(self):
        smad3 = self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "does", "VBZ", "do")
        self.add_word(2, "not", "RB", sense=negator)
        self.add_word(3, "bind", "VB", sense=interact)
        self.add_word(4, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(2, 3, "neg")
        self.graph.add_edge(3, 0, "nsubj")
        self.graph.add_edge(3, 1, "aux")
        self.graph.add_edge(3, 4, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        binding, negation = self.semantic_graph.predications()
        self.assertEqual(binding.arg_items("SUBJ"), [entity_of(smad3)])
        self.assertEqual(negation.type, "NEGATOR")
        self.assertEqual(negation.arg_items("COMP"), [binding])
        self.assertEqual(manager.factuality(binding), "Counterfact")

    def test_speculation(self):
        self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(
            1,
            "may",
            "MD",
            sense=Sense(
                "SPECULATIVE", prior_scalar_value=0.5, embedding_types=["AUX"], pos="MD"
            ),
        )
        self.add_word(2, "bind", "VB", sense=interact)
        self.add_word(3, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 2, "aux")
        self.graph.add_edge(2, 0, "nsubj")
        self.graph.add_edge(2, 3, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        binding, speculation = self.semantic_graph.predications()
        self.assertEqual(speculation.type, "SPECULATIVE")
        self.assertEqual(speculation.arg_items("COMP"), [binding])
        self.assertEqual(binding.scalar_values[0].value.begin, 0.5)
        self.assertEqual(manager.factuality(binding), "Possible")

    def test_attribution(self):
        smith = self.add_word(0, "Smith", "NNP", entity_type="PERSON")
        self.add_word(
            1,
            "suggests",
            "VBZ",
            "suggest",
            Sense(
                "SPECULATIVE",
                prior_scalar_value=0.6,
                embedding_types=["THAT_COMP"],
                pos="VB",
            ),
        )
        self.add_word(2, "that", "IN")
        self.add_word(3, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(4, "binds", "VBZ", "bind", interact)
        self.add_word(5, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 4, "ccomp")
        self.graph.add_edge(4, 2, "mark")
        self.graph.add_edge(4, 3, "nsubj")
        self.graph.add_edge(4, 5, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        binding, speculation = self.semantic_graph.predications()
        self.assertEqual(speculation.arg_items("SUBJ"), [entity_of(smith)])
        self.assertEqual(speculation.arg_items("COMP"), [binding])
        self.assertEqual(speculation.sources, (entity_of(smith),))
        self.assertEqual(binding.sources, (entity_of(smith),))
        self.assertEqual(binding.scalar_values[0].value.begin, 0.6)
        self.assertEqual(manager.factuality(binding), "Possible")

    def test_ambiguous_role_yields_one_predication_per_choice(self):
        aspirin = self.add_word(0, "Aspirin", "NN", entity_type="DRUG")
        self.add_word(1, "treats", "VBZ", "treat", treat)
        fever = self.add_word(2, "fever", "NN", entity_type="DISEASE")
        pain = self.add_word(3, "pain", "NN", entity_type="DISEASE")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "dobj")
        self.graph.add_edge(1, 3, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 2)
        for predication in predications:
            self.assertEqual(predication.arg_items("SUBJ"), [entity_of(aspirin)])
            self.assertEqual(len(predication.arg_items("THEME")), 1)
        self.assertEqual(
            [predication.arg_items("THEME")[0] for predication in predications],
            [entity_of(fever), entity_of(pain)],
        )

    def test_two_ambiguous_roles(self):
        self.add_word(0, "Aspirin", "NN", entity_type="DRUG")
        self.add_word(1, "ibuprofen", "NN", entity_type="DRUG")
        self.add_word(2, "treat", "VBP", sense=treat)
        self.add_word(3, "fever", "NN", entity_type="DISEASE")
        self.add_word(4, "pain", "NN", entity_type="DISEASE")
        self.graph.add_edge(2, 0, "nsubj")
        self.graph.add_edge(2, 1, "nsubj")
        self.graph.add_edge(2, 3, "dobj")
        self.graph.add_edge(2, 4, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 4)

    def test_semantic_type_restriction(self):
        self.add_word(0, "Aspirin", "NN", entity_type="DRUG")
        self.add_word(1, "treats", "VBZ", "treat", treat)
        self.add_word(2, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 0)

    def test_cycle(self):
        self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(0, 1, "dep")
        self.graph.add_edge(1, 0, "dep")
        with self.assertLogs("semantic_composer.argument_identification", level="ERROR"):
            manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 0)

    def test_cycle_below_root(self):
        self.binding_graph()
        self.graph.add_edge(0, 1, "dep")
        self.graph.add_node(Node("ROOT", is_surface=False))
        self.graph.add_edge("ROOT", 1, "root")
        with self.assertLogs("semantic_composer.argument_identification", level="ERROR"):
            manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 1)

    def test_leaf_entity_is_returned_unchanged(self):
        smad3 = self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        semantics = manager.argument_identifier.identify(
            smad3, self.graph, self.semantic_graph
        )
        self.assertEqual(len(semantics), 1)
        self.assertIs(semantics[0], entity_of(smad3))

    def test_bare_predicate_leaf_exposes_nothing(self):
        binds = self.add_word(0, "binds", "VBZ", "bind", interact)
        self.assertEqual(
            manager.argument_identifier.identify(binds, self.graph, self.semantic_graph),
            [],
        )

    def test_leaf_with_resolved_relation(self):
        smad3, smad4 = self.binding_graph()
        manager.compose(self.graph, self.semantic_graph)
        binding = self.semantic_graph.predications()[0]
        leaf_graph = DependencyGraph("leaf")
        leaf = leaf_graph.add_node(Node(1, "binds", "bind", "VBZ", span(10, 15)))
        leaf.semantics.extend(self.graph.node(1).semantics)
        self.assertEqual(
            manager.argument_identifier.identify(leaf, leaf_graph, self.semantic_graph),
            [],
        )
        leaf.semantics.append(binding)
        self.assertEqual(
            manager.argument_identifier.identify(leaf, leaf_graph, self.semantic_graph),
            [binding],
        )
        self.assertEqual(
            manager.argument_identifier.identify(
                leaf, leaf_graph, self.semantic_graph, create_if_exists=True
            ),
            [],
        )

    def test_generic_predicate(self):
        smad3 = self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "interacts", "VBZ", "interact")
        smad4 = self.add_word(2, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "prep_with")
        manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 0)
        generic_manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 1)
        self.assertTrue(predications[0].is_generic)
        self.assertEqual(predications[0].arg_items("SUBJ"), [entity_of(smad3)])
        self.assertEqual(predications[0].arg_items("prep_with"), [entity_of(smad4)])

    def test_existing_relations_are_reused(self):
        self.binding_graph()
        manager.compose(self.graph, self.semantic_graph)
        manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 1)
        if_exists_manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 2)

    def test_subsumed_predicate_is_skipped(self):
        self.binding_graph()
        binds = self.graph.node(1)
        binds.semantics.append(
            self.semantic_graph.new_predicate(
                "INTERACT", span(10, 14), "bind", 1, "VBZ", interact
            )
        )
        with self.assertLogs("semantic_composer.argument_identification", level="WARNING"):
            manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 1)
        self.assertIs(predications[0].predicate, binds.semantics[0])

    def test_predicate_without_definition(self):
        self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "phosphorylates", "VBZ", sense=Sense("PHOSPHORYLATE"))
        self.add_word(2, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "dobj")
        manager.compose(self.graph, self.semantic_graph)
        self.assertEqual(len(self.semantic_graph.predications()), 0)

    def adverbial_graph(self, intervening_text, intervening_lemma):
        self.add_word(
            0,
            "possibly",
            "RB",
            sense=Sense(
                "SPECULATIVE", prior_scalar_value=0.5, embedding_types=["ADVMOD"], pos="RB"
            ),
        )
        self.add_word(1, intervening_text, "VBZ", intervening_lemma)
        self.add_word(2, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(3, "binds", "VBZ", "bind", interact)
        self.add_word(4, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(0, 1, "advmod")
        self.graph.add_edge(1, 3, "ccomp")
        self.graph.add_edge(3, 2, "nsubj")
        self.graph.add_edge(3, 4, "dobj")

    def test_adverb_does_not_reach_across_verb(self):
        self.adverbial_graph("shows", "show")
        manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 1)
        self.assertEqual(manager.factuality(predications[0]), "Fact")

    def test_adverb_reaches_across_transparent_verb(self):
        self.adverbial_graph("has", "have")
        manager.compose(self.graph, self.semantic_graph)
        binding, speculation = self.semantic_graph.predications()
        self.assertEqual(speculation.arg_items("COMP"), [binding])
        self.assertEqual(manager.factuality(binding), "Possible")

    def test_negated_argument(self):
        smad3 = self.add_word(0, "Smad3", "NN", entity_type="PROTEIN")
        self.add_word(1, "binds", "VBZ", "bind", interact)
        self.add_word(2, "not", "RB", sense=negator)
        smad4 = self.add_word(3, "Smad4", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "dobj")
        self.graph.add_edge(2, 3, "dep")
        manager.compose(self.graph, self.semantic_graph)
        binding, negation = self.semantic_graph.predications()
        self.assertEqual(binding.arg_items("SUBJ"), [entity_of(smad3)])
        self.assertEqual(binding.arg_items("COMP"), [entity_of(smad4)])
        self.assertIs(negation.predicate, self.graph.node(2).semantics[0])
        self.assertEqual(negation.arg_items("COMP"), [binding])
        self.assertEqual(manager.factuality(binding), "Counterfact")

    def test_inverse_sense(self):
        effect = self.add_word(0, "apoptosis", "NN", entity_type="PROCESS")
        self.add_word(
            1,
            "results",
            "VBZ",
            "result",
            Sense("CAUSE", embedding_types=["PREP_FROM"], inverse=True, pos="VB"),
        )
        cause = self.add_word(2, "Smad3", "NN", entity_type="PROTEIN")
        self.graph.add_edge(1, 0, "nsubj")
        self.graph.add_edge(1, 2, "prep_from")
        manager.compose(self.graph, self.semantic_graph)
        predications = self.semantic_graph.predications()
        self.assertEqual(len(predications), 1)
        self.assertEqual(predications[0].arg_items("SUBJ"), [entity_of(cause)])
        self.assertEqual(predications[0].arg_items("COMP"), [entity_of(effect)])

    def test_modal_over_relation_owned_by_another_graph(self):
        upstream = SemanticGraph("upstream")
        smad3 = upstream.new_entity("PROTEIN", span(0, 5), "Smad3", 0)
        smad4 = upstream.new_entity("PROTEIN", span(30, 35), "Smad4", 3)
        self.add_word(
            1,
            "may",
            "MD",
            sense=Sense(
                "SPECULATIVE", prior_scalar_value=0.5, embedding_types=["AUX"], pos="MD"
            ),
        )
        bind = self.add_word(2, "bind", "VB", sense=interact)
        binding = upstream.new_predication(
            bind.semantics[0], [Argument("SUBJ", smad3), Argument("COMP", smad4)]
        )
        bind.semantics.append(binding)
        self.graph.add_edge(1, 2, "aux")
        manager.compose(self.graph, self.semantic_graph)
        surfaced, speculation = self.semantic_graph.predications()
        self.assertIs(surfaced, binding)
        self.assertIs(binding.owner, upstream)
        self.assertEqual(speculation.arg_items("COMP"), [binding])
        self.assertEqual(binding.scalar_values[0].value.begin, 0.5)
        self.assertEqual(binding.sources, speculation.sources)


class HelperTest(unittest.TestCase):
    def test_generate_permutations(self):
        self.assertEqual(generate_permutations([[1, 2], [3]]), [[1, 3], [2, 3]])
        self.assertEqual(len(generate_permutations([[1, 2], [3, 4]])), 4)
        self.assertEqual(len(generate_permutations([[1, 2, 3], [4, 5], [6]])), 6)
        self.assertEqual(generate_permutations([]), [])
        self.assertEqual(generate_permutations([[1], []]), [])

    def test_invert(self):
        semantic_graph = SemanticGraph()
        first = semantic_graph.new_entity("PROTEIN")
        second = semantic_graph.new_entity("PROTEIN")
        third = semantic_graph.new_entity("PROTEIN")
        inverted = invert(
            [Argument("SUBJ", first), Argument("COMP", second), Argument("COMP", third)]
        )
        self.assertEqual(
            inverted,
            [Argument("COMP", first), Argument("SUBJ", second), Argument("COMP", third)],
        )
        self.assertEqual(
            invert([Argument("THEME", first)]), [Argument("THEME", first)]
        )
