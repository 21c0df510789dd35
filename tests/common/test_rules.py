import unittest
import os
import tempfile
import srsly
from semantic_composer.rules import (
    ArgumentRule,
    ArgumentRuleTable,
    DependencyClass,
    DependencyClassTable,
    load_dependency_classes,
    load_argument_rules,
)
from semantic_composer.lexicon import Lexicon, load_lexicon
from semantic_composer.semantics import Sense
from semantic_composer.errors import InvalidRuleTableError, InvalidSenseError

dependency_classes = load_dependency_classes()
argument_rules = load_argument_rules(dependency_classes)


class DependencyClassTest(unittest.TestCase):
    def test_filter_by_dep_class(self):
        subject_labels = dependency_classes.filter_by_dep_class("VB", "SUBJ")
        self.assertIn("nsubj", subject_labels)
        self.assertIn("mark", subject_labels)
        self.assertNotIn("dobj", subject_labels)
        self.assertEqual(dependency_classes.filter_by_dep_class("VB", "UNKNOWN"), [])

    def test_wildcard_category(self):
        self.assertEqual(
            dependency_classes.filter_by_dep_class("NN", "PREP_IN"), ["prep_in", "prepc_in"]
        )
        self.assertEqual(
            dependency_classes.filter_by_dep_class("VB", "PREP_IN"), ["prep_in", "prepc_in"]
        )

    def test_in_class_by_membership(self):
        self.assertTrue(dependency_classes.in_class("MD", "aux", ["AUX"]))
        self.assertTrue(dependency_classes.in_class("VB", "ccomp", ["THAT_COMP"]))
        self.assertFalse(dependency_classes.in_class("VB", "dobj", ["THAT_COMP"]))

    def test_in_class_by_label(self):
        self.assertTrue(dependency_classes.in_class("RB", "neg", ["NEG"]))
        self.assertTrue(dependency_classes.in_class("RB", "advmod", ["ADVMOD"]))

    def test_in_class_without_embedding_types(self):
        self.assertFalse(dependency_classes.in_class("VB", "ccomp", None))
        self.assertFalse(dependency_classes.in_class("VB", "ccomp", []))

    def test_custom_table(self):
        table = DependencyClassTable([DependencyClass("SUBJ", "VB", ["nsubj"])])
        self.assertEqual(table.filter_by_dep_class("VB", "SUBJ"), ["nsubj"])
        self.assertEqual(table.filter_by_dep_class("NN", "SUBJ"), [])


class ArgumentRuleTest(unittest.TestCase):
    def test_verbal_subject_and_object(self):
        self.assertEqual(
            argument_rules.find_matching_rule("nsubj", "bind", "VB", None).argument_type,
            "SUBJ",
        )
        self.assertEqual(
            argument_rules.find_matching_rule("dobj", "bind", "VB", None).argument_type,
            "COMP",
        )

    def test_specific_lemma(self):
        self.assertEqual(
            argument_rules.find_matching_rule("dobj", "associate", "VB", None).argument_type,
            "SUBJ",
        )
        self.assertEqual(
            argument_rules.find_matching_rule("prep_of", "role", "NN", None).argument_type,
            "SUBJ",
        )
        self.assertEqual(
            argument_rules.find_matching_rule(
                "prep_of", "expression", "NN", None
            ).argument_type,
            "COMP",
        )

    def test_lemma_exception(self):
        self.assertIsNone(argument_rules.find_matching_rule("dobj", "determine", "VB", None))

    def test_class_exception(self):
        self.assertEqual(
            argument_rules.find_matching_rule("prep_with", "effect", "NN", None).argument_type,
            "SUBJ",
        )
        self.assertIsNone(
            argument_rules.find_matching_rule("prep_with", "effect", "NN", ["PREP_WITH"])
        )

    def test_adjunct_rule(self):
        self.assertEqual(
            argument_rules.find_matching_rule("prep_in", "bind", "VB", None).argument_type,
            "ADJUNCT_IN",
        )
        self.assertIsNone(
            argument_rules.find_matching_rule("prep_in", "bind", "VB", ["PREP_IN"])
        )

    def test_no_rule_for_label(self):
        self.assertIsNone(argument_rules.find_matching_rule("prep_with", "bind", "VB", None))

    def test_invalid_inputs(self):
        self.assertIsNone(argument_rules.find_matching_rule("", "bind", "VB", None))
        self.assertIsNone(argument_rules.find_matching_rule("dobj", None, "VB", None))
        self.assertEqual(argument_rules.filter_by_category(""), [])

    def test_preferred_rules(self):
        preferred_rule = ArgumentRule("OBJ", "VB", "THEME")
        self.assertIs(
            argument_rules.find_matching_rule(
                "dobj", "treat", "VB", None, preferred_rules=[preferred_rule]
            ),
            preferred_rule,
        )
        self.assertEqual(
            argument_rules.find_matching_rule(
                "nsubj", "treat", "VB", None, preferred_rules=[preferred_rule]
            ).argument_type,
            "SUBJ",
        )

    def test_first_matching_rule_wins(self):
        table = ArgumentRuleTable(
            [ArgumentRule("OBJ", "VB", "THEME"), ArgumentRule("OBJ", "VB", "COMP")],
            dependency_classes,
        )
        self.assertEqual(
            table.find_matching_rule("dobj", "bind", "VB", None).argument_type, "THEME"
        )

    def test_rule_without_dependency_class_matches_label(self):
        table = ArgumentRuleTable([ArgumentRule("DET", "DT", "COMP")], dependency_classes)
        self.assertIsNotNone(table.find_matching_rule("DET", "no", "DT", None))
        self.assertIsNone(table.find_matching_rule("det", "no", "DT", None))

    def test_determinism(self):
        first_rule = argument_rules.find_matching_rule("dobj", "bind", "VB", ["THAT_COMP"])
        for _ in range(10):
            self.assertIs(
                argument_rules.find_matching_rule("dobj", "bind", "VB", ["THAT_COMP"]),
                first_rule,
            )

    def test_rule_string_representation(self):
        self.assertEqual(
            str(ArgumentRule("OBJ", "VB", "COMP", exceptions=["determine"])),
            "OBJ_VB_COMP_EXCEPT(determine)_SPECIFIC()_EXCEPT_CLASS()_SPECIFIC_CLASS()",
        )

    def test_invalid_rule_tables(self):
        with tempfile.TemporaryDirectory() as directory:
            not_a_list = os.sep.join((directory, "not_a_list.json"))
            srsly.write_json(not_a_list, {"dep_type": "OBJ"})
            with self.assertRaises(InvalidRuleTableError):
                load_argument_rules(dependency_classes, not_a_list)
            missing_field = os.sep.join((directory, "missing_field.json"))
            srsly.write_json(missing_field, [{"dep_type": "OBJ", "category": "VB"}])
            with self.assertRaises(InvalidRuleTableError):
                load_argument_rules(dependency_classes, missing_field)
            with self.assertRaises(InvalidRuleTableError):
                load_dependency_classes(missing_field)


class LexiconTest(unittest.TestCase):
    def test_default_lexicon(self):
        lexicon = load_lexicon()
        self.assertEqual(lexicon.most_probable_sense("may", "MD").category, "SPECULATIVE")
        self.assertEqual(lexicon.most_probable_sense("not", "RB").category, "NEGATOR")
        self.assertEqual(
            lexicon.most_probable_sense("suggest", "VBZ").embedding_types, ["THAT_COMP"]
        )
        self.assertIsNone(lexicon.most_probable_sense("may", "NNP"))
        self.assertIsNone(lexicon.most_probable_sense("bind", "VB"))

    def test_most_probable_sense(self):
        lexicon = Lexicon(
            {
                "discharge": [
                    Sense("DISCHARGE", probability=0.3),
                    Sense("RELEASE", probability=0.7),
                ]
            }
        )
        self.assertEqual(lexicon.most_probable_sense("Discharge").category, "RELEASE")
        self.assertEqual(len(lexicon.senses("discharge")), 2)
        self.assertIn("discharge", lexicon)

    def test_invalid_senses(self):
        with self.assertRaises(InvalidSenseError):
            Sense("SPECULATIVE", prior_scalar_value=1.5)
        with self.assertRaises(InvalidSenseError):
            Sense(" ")
        with tempfile.TemporaryDirectory() as directory:
            filename = os.sep.join((directory, "lexicon.json"))
            srsly.write_json(filename, {"may": [{"prior_scalar_value": 0.5}]})
            with self.assertRaises(InvalidSenseError):
                load_lexicon(filename)
            srsly.write_json(filename, {"may": [{"category": "SPECULATIVE", "scope_type": "X"}]})
            with self.assertRaises(InvalidSenseError):
                load_lexicon(filename)

    def test_sense_argument_rules(self):
        with tempfile.TemporaryDirectory() as directory:
            filename = os.sep.join((directory, "lexicon.json"))
            srsly.write_json(
                filename,
                {
                    "treat": [
                        {
                            "category": "TREAT",
                            "argument_rules": [
                                {"dep_type": "OBJ", "category": "VB", "argument_type": "THEME"}
                            ],
                        }
                    ]
                },
            )
            sense = load_lexicon(filename).most_probable_sense("treat", "VB")
        self.assertEqual(sense.argument_rules[0].argument_type, "THEME")
