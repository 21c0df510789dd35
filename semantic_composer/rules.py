from typing import List, Optional, Iterable, FrozenSet
import logging
import os
import srsly
from .errors import InvalidRuleTableError

logger = logging.getLogger(__name__)

# argument roles through which the scope of an embedding predicate extends
SCOPE_ARGUMENT_TYPES = ("OBJ", "COMP", "Arg2")

# matches every lexical category
ANY_CATEGORY = "*"

DATA_DIRECTORY = os.sep.join((os.path.dirname(os.path.realpath(__file__)), "data"))


class DependencyClass:
    """A high-level dependency class, e.g. *SUBJ*, and the dependency labels that belong to
    it for words of a given lexical category.

    dep_class -- the name of the class.
    category -- the lexical category the class applies to, or *'\\*'* for all categories.
    dep_types -- the dependency labels belonging to the class.
    """

    def __init__(self, dep_class: str, category: str, dep_types: List[str]):
        self.dep_class = dep_class
        self.category = category
        self.dep_types = tuple(dep_types)

    def applies_to(self, category: str) -> bool:
        return self.category.startswith(category) or self.category == ANY_CATEGORY

    def __str__(self) -> str:
        return "".join(
            (self.dep_class, "_", self.category, "[", ",".join(self.dep_types), "]")
        )


class DependencyClassTable:
    """An immutable, ordered collection of dependency classes."""

    def __init__(self, classes: Iterable[DependencyClass]):
        self.classes = tuple(classes)

    def filter_by_category(self, category: str) -> List[DependencyClass]:
        return [
            dependency_class
            for dependency_class in self.classes
            if dependency_class.applies_to(category)
        ]

    def filter_by_dep_class(self, category: str, dep_class: str) -> List[str]:
        """Returns the dependency labels that belong to *dep_class* for *category*."""
        dep_types: List[str] = []
        for dependency_class in self.filter_by_category(category):
            if dependency_class.dep_class == dep_class:
                dep_types.extend(dependency_class.dep_types)
        return dep_types

    def filter_by_dep_classes(
        self, category: str, dep_classes: Optional[Iterable[str]]
    ) -> List[str]:
        dep_types: List[str] = []
        if dep_classes is None:
            return dep_types
        dep_classes = set(dep_classes)
        for dependency_class in self.filter_by_category(category):
            if dependency_class.dep_class in dep_classes:
                dep_types.extend(dependency_class.dep_types)
        return dep_types

    def in_class(
        self, category: str, label: str, embedding_types: Optional[List[str]]
    ) -> bool:
        """Determines whether the dependency label *label* belongs to one of the high-level
        classes in *embedding_types* for *category*. An entry in *embedding_types* may also
        name a dependency label directly, compared case-insensitively."""
        if embedding_types is None or len(embedding_types) == 0:
            return False
        for embedding_type in embedding_types:
            if label.lower() == embedding_type.lower():
                logger.debug("Dependency %s is in class %s.", label, embedding_type)
                return True
            for dependency_class in self.classes:
                if (
                    dependency_class.dep_class == embedding_type
                    and dependency_class.applies_to(category)
                    and label in dependency_class.dep_types
                ):
                    logger.debug("Dependency %s is in class %s.", label, embedding_type)
                    return True
        return False


def _optional_frozenset(values: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
    if values is None:
        return None
    return frozenset(values)


class ArgumentRule:
    """Maps a dependency of a word of a given lexical category to an argument role.

    Args:

    dep_type -- a high-level dependency class, or a dependency label in upper case if no such
        class exists for *category*.
    category -- the lexical category of the governing word, e.g. *VB*.
    argument_type -- the role the dependent fills.
    exceptions -- lemmas the rule does not apply to.
    specific_to -- lemmas the rule is restricted to.
    exception_classes -- high-level dependency classes whose presence among the embedding
        types of the governing word's sense prevents the rule from applying.
    specific_classes -- high-level dependency classes the rule is restricted to.
    """

    def __init__(
        self,
        dep_type: str,
        category: str,
        argument_type: str,
        exceptions: Optional[Iterable[str]] = None,
        specific_to: Optional[Iterable[str]] = None,
        exception_classes: Optional[Iterable[str]] = None,
        specific_classes: Optional[Iterable[str]] = None,
    ):
        self.dep_type = dep_type
        self.category = category
        self.argument_type = argument_type
        self.exceptions = _optional_frozenset(exceptions)
        self.specific_to = _optional_frozenset(specific_to)
        self.exception_classes = _optional_frozenset(exception_classes)
        self.specific_classes = _optional_frozenset(specific_classes)

    @property
    def is_unrestricted(self) -> bool:
        return (
            self.exceptions is None
            and self.specific_to is None
            and self.exception_classes is None
            and self.specific_classes is None
        )

    def __str__(self) -> str:
        def format_set(values):
            return ",".join(sorted(values)) if values is not None else ""

        return "".join(
            (
                self.dep_type,
                "_",
                self.category,
                "_",
                self.argument_type,
                "_EXCEPT(",
                format_set(self.exceptions),
                ")_SPECIFIC(",
                format_set(self.specific_to),
                ")_EXCEPT_CLASS(",
                format_set(self.exception_classes),
                ")_SPECIFIC_CLASS(",
                format_set(self.specific_classes),
                ")",
            )
        )


class ArgumentRuleTable:
    """An immutable, ordered list of argument rules. Order is significant: the first
    matching rule wins.

    rules -- the rules.
    dependency_classes -- the *DependencyClassTable* used to resolve the high-level
        dependency classes the rules refer to.
    """

    def __init__(
        self, rules: Iterable[ArgumentRule], dependency_classes: DependencyClassTable
    ):
        self.rules = tuple(rules)
        self.dependency_classes = dependency_classes

    def filter_by_category(
        self, category: str, rules: Optional[Iterable[ArgumentRule]] = None
    ) -> List[ArgumentRule]:
        """Returns the rules whose category starts with *category*."""
        if rules is None:
            rules = self.rules
        if category is None or len(category.strip()) == 0:
            logger.warning("Invalid category provided for filtering.")
            return []
        return [rule for rule in rules if rule.category.startswith(category)]

    def find_matching_rule(
        self,
        label: str,
        lemma: str,
        category: str,
        embedding_types: Optional[List[str]],
        preferred_rules: Optional[List[ArgumentRule]] = None,
    ) -> Optional[ArgumentRule]:
        """Finds the first rule applying to a dependency.

        Args:

        label -- the dependency label.
        lemma -- the lemma of the governing word.
        category -- the lexical category of the governing word.
        embedding_types -- the embedding types of the governing word's sense, or *None*.
        preferred_rules -- rules, e.g. from the governing word's sense, that are tried before
            the rules in this table.
        """
        if label is None or len(label.strip()) == 0:
            logger.warning("Invalid dependency label provided for rule matching.")
            return None
        if lemma is None:
            logger.warning("Invalid lemma provided for rule matching.")
            return None
        candidate_rules: List[ArgumentRule] = []
        if preferred_rules is not None:
            candidate_rules.extend(self.filter_by_category(category, preferred_rules))
        candidate_rules.extend(self.filter_by_category(category))
        for rule in candidate_rules:
            if self._rule_matches(rule, label, lemma, category, embedding_types):
                logger.debug("Argument rule %s matches %s_%s_%s.", rule, lemma, category, label)
                return rule
        return None

    def _rule_matches(
        self,
        rule: ArgumentRule,
        label: str,
        lemma: str,
        category: str,
        embedding_types: Optional[List[str]],
    ) -> bool:
        corresponding_labels = self.dependency_classes.filter_by_dep_class(
            category, rule.dep_type
        )
        if len(corresponding_labels) == 0:
            corresponding_labels = [rule.dep_type.upper()]
        if label not in corresponding_labels:
            return False
        if rule.is_unrestricted:
            return True
        if rule.exceptions is not None and lemma in rule.exceptions:
            return False
        if (
            rule.exception_classes is not None
            and embedding_types is not None
            and len(rule.exception_classes.intersection(embedding_types)) > 0
        ):
            return False
        if rule.specific_to is not None and lemma in rule.specific_to:
            return True
        if rule.specific_to is None and (
            rule.specific_classes is None
            or (
                embedding_types is not None
                and len(rule.specific_classes.intersection(embedding_types)) > 0
            )
        ):
            return True
        return label in self.dependency_classes.filter_by_dep_classes(
            category, rule.specific_classes
        )


def load_dependency_classes(path: Optional[str] = None) -> DependencyClassTable:
    """Loads a dependency class table from a JSON file, by default the table shipped with
    the package."""
    if path is None:
        path = os.sep.join((DATA_DIRECTORY, "dependency_classes.json"))
    classes = []
    for entry in _read_entries(path):
        try:
            classes.append(
                DependencyClass(entry["dep_class"], entry["category"], entry["dep_types"])
            )
        except KeyError as err:
            raise InvalidRuleTableError(
                "".join(("Dependency class in ", path, " lacks field ", str(err)))
            )
    return DependencyClassTable(classes)


def load_argument_rules(
    dependency_classes: DependencyClassTable, path: Optional[str] = None
) -> ArgumentRuleTable:
    """Loads an argument rule table from a JSON file, by default the table shipped with the
    package."""
    if path is None:
        path = os.sep.join((DATA_DIRECTORY, "argument_rules.json"))
    return ArgumentRuleTable(
        [argument_rule_from_dict(entry, path) for entry in _read_entries(path)],
        dependency_classes,
    )


def argument_rule_from_dict(entry: dict, source: str = "") -> ArgumentRule:
    try:
        return ArgumentRule(
            entry["dep_type"],
            entry["category"],
            entry["argument_type"],
            exceptions=entry.get("exceptions"),
            specific_to=entry.get("specific_to"),
            exception_classes=entry.get("exception_classes"),
            specific_classes=entry.get("specific_classes"),
        )
    except KeyError as err:
        raise InvalidRuleTableError(
            "".join(("Argument rule in ", source, " lacks field ", str(err)))
        )


def _read_entries(path: str) -> list:
    entries = srsly.read_json(path)
    if not isinstance(entries, list):
        raise InvalidRuleTableError(
            "".join(("Rule table ", path, " must contain a JSON list"))
        )
    for entry in entries:
        if not isinstance(entry, dict):
            raise InvalidRuleTableError(
                "".join(("Rule table ", path, " contains an entry that is not an object"))
            )
    return entries
