from typing import List, Dict, Set, FrozenSet, Union, Optional
import rdflib
from rdflib.namespace import RDFS
from .errors import UnknownEmbeddingCategoryError

CATEGORY_NAMESPACE = rdflib.Namespace("urn:semantic-composer:embedding#")
ROOT_CATEGORY = "embedding"

# parent category: child categories
DEFAULT_CATEGORIES = {
    ROOT_CATEGORY: ["MODAL", "RELATIONAL", "PROPOSITIONAL", "VALENCE_SHIFTER", "OTHER"],
    "MODAL": [
        "EPISTEMIC",
        "EVIDENTIAL",
        "DEONTIC",
        "DYNAMIC",
        "SUCCESS",
        "INTENTIONAL",
        "INTERROGATIVE",
        "EVALUATIVE",
    ],
    "EPISTEMIC": ["ASSUMPTIVE", "SPECULATIVE"],
    "EVIDENTIAL": ["SENSORY", "REPORTING", "DEDUCTIVE", "DEMONSTRATIVE"],
    "DEONTIC": ["PERMISSIVE", "OBLIGATIVE", "COMMISSIVE"],
    "DYNAMIC": ["POTENTIAL", "VOLITIVE"],
    "RELATIONAL": [
        "TEMPORAL",
        "CAUSAL",
        "CORRELATIVE",
        "CONDITIONAL",
        "COMPARATIVE",
        "EXPANSION",
    ],
    "TEMPORAL": ["SYNCHRONOUS", "ASYNCHRONOUS"],
    "CAUSAL": ["CAUSE", "ENABLE", "PREVENT"],
    "COMPARATIVE": ["CONTRAST", "CONCESSION", "HIGHER_THAN", "LOWER_THAN", "SAME_AS"],
    "EXPANSION": [
        "CONJUNCTION",
        "INSTANTIATION",
        "SPECIFICATION",
        "EQUIVALENCE",
        "ALTERNATIVE",
        "EXCEPTION",
        "LIST",
    ],
    "PROPOSITIONAL": ["ASPECTUAL", "SEMANTIC_ROLE"],
    "ASPECTUAL": ["INITIATE", "REINITIATE", "CONTINUE", "CULMINATE", "TERMINATE"],
    "SEMANTIC_ROLE": [
        "AGENT",
        "PATIENT",
        "BENEFICIARY",
        "EXPERIENCER",
        "INSTRUMENT",
        "PLACE",
        "TIME",
        "PURPOSE",
        "MANNER",
    ],
    "VALENCE_SHIFTER": ["SCALE_SHIFTER", "POLARITY_SHIFTER"],
    "SCALE_SHIFTER": ["DIMINISHER", "INTENSIFIER", "NEGATOR", "HEDGE"],
    "POLARITY_SHIFTER": ["POSITIVE_SHIFT", "NEGATIVE_SHIFT", "NEUTRALIZE"],
}


class EmbeddingCategorization:
    """The is-a taxonomy of embedding categories that predicate types are classified by.

    The taxonomy is held as an RDF graph of *rdfs:subClassOf* statements. It is built once
    and not changed afterwards, so that a single instance can be shared between composers
    running on different threads.

    Args:

    extension_path -- the path of an RDF file, or a list of such paths, with further
        *rdfs:subClassOf* statements whose subjects and objects are categories within
        *CATEGORY_NAMESPACE*, e.g. to introduce domain-specific subcategories. Defaults to
        *None*.
    hyponym_type -- optionally overrides the RDF URL for hyponyms.
    """

    def __init__(
        self,
        extension_path: Union[str, List[str], None] = None,
        hyponym_type: str = str(RDFS.subClassOf),
    ):
        self.hyponym_type = rdflib.URIRef(hyponym_type)
        self._graph = rdflib.Graph()
        for parent, children in DEFAULT_CATEGORIES.items():
            for child in children:
                self._graph.add(
                    (
                        CATEGORY_NAMESPACE[child],
                        self.hyponym_type,
                        CATEGORY_NAMESPACE[parent],
                    )
                )
        if extension_path is not None:
            if isinstance(extension_path, list):
                for entry in extension_path:
                    self._graph.parse(entry)
            else:
                self._graph.parse(extension_path)
        self._parents: Dict[str, List[str]] = {}
        for child_url, _, parent_url in self._graph.triples(
            (None, self.hyponym_type, None)
        ):
            child = self._get_category_name(child_url)
            parent = self._get_category_name(parent_url)
            if child is None or parent is None:
                continue
            self._parents.setdefault(child, [])
            self._parents.setdefault(parent, [])
            if parent not in self._parents[child]:
                self._parents[child].append(parent)
        self._descendants: Dict[str, FrozenSet[str]] = {}
        for category in self._parents:
            descendants: Set[str] = set()
            self._add_descendants(category, descendants)
            self._descendants[category] = frozenset(descendants)

    def _get_category_name(self, url) -> Optional[str]:
        url = str(url)
        if not url.startswith(str(CATEGORY_NAMESPACE)):
            return None
        return url[len(str(CATEGORY_NAMESPACE)) :]

    def _add_descendants(self, category: str, descendants: Set[str]) -> None:
        if category in descendants:
            return
        descendants.add(category)
        for child_url, _, _ in self._graph.triples(
            (None, self.hyponym_type, CATEGORY_NAMESPACE[category])
        ):
            child = self._get_category_name(child_url)
            if child is not None:
                self._add_descendants(child, descendants)

    def contains(self, category: str) -> bool:
        return category in self._descendants

    def categories(self) -> List[str]:
        return sorted(self._descendants.keys())

    def descendants(self, categories: Union[str, List[str]]) -> FrozenSet[str]:
        """Returns the categories subsumed by *categories*, *categories* included. Names that
        are not within the taxonomy contribute nothing."""
        if isinstance(categories, str):
            return self._descendants.get(categories, frozenset())
        descendants: Set[str] = set()
        for category in categories:
            descendants.update(self._descendants.get(category, frozenset()))
        return frozenset(descendants)

    def ancestors(self, category: str) -> List[str]:
        """Returns the categories subsuming *category*, nearest first, *category* excluded.

        Raises *UnknownEmbeddingCategoryError* if *category* is not within the taxonomy.
        """
        if category not in self._parents:
            raise UnknownEmbeddingCategoryError(
                " ".join(("Unknown embedding category", str(category)))
            )
        ancestors: List[str] = []
        working_categories = list(self._parents[category])
        while len(working_categories) > 0:
            next_categories: List[str] = []
            for working_category in working_categories:
                if working_category in ancestors or working_category == category:
                    continue
                ancestors.append(working_category)
                next_categories.extend(self._parents[working_category])
            working_categories = next_categories
        return ancestors

    def is_embedding(self, type: str) -> bool:
        return type in self._descendants and type != ROOT_CATEGORY

    def is_modal(self, type: str) -> bool:
        return type in self.descendants("MODAL")

    def is_epistemic_scalar(self, type: str) -> bool:
        return type in self.descendants(["EPISTEMIC", "EVIDENTIAL"])

    def is_relational(self, type: str) -> bool:
        return type in self.descendants("RELATIONAL")

    def is_scale_shifter(self, type: str) -> bool:
        return type in self.descendants("SCALE_SHIFTER")

    def is_deontic(self, type: str) -> bool:
        return type in self.descendants("DEONTIC")
