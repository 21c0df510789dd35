from typing import List, Optional
from multiprocessing import cpu_count
from queue import Queue, Empty
from threading import Thread, Lock
import logging
import os
from spacy import Language
from spacy.tokens import Doc
from wasabi import Printer  # type: ignore[import]
from thinc.api import Config
from .graph import DependencyGraph
from .semantic_graph import SemanticGraph
from .semantics import Predication
from .categorization import EmbeddingCategorization
from .relations import RelationDefinition, RelationDefinitionRegistry, default_relation_definitions
from .rules import (
    DATA_DIRECTORY,
    DependencyClassTable,
    ArgumentRuleTable,
    load_dependency_classes,
    load_argument_rules,
)
from .lexicon import Lexicon, load_lexicon
from .parsing import DocumentGraphBuilder
from .scalar_modality import ScalarModalityComposer
from .source_propagation import SourcePropagator
from .argument_propagation import ArgumentPropagator
from .argument_identification import ArgumentIdentifier
from .factuality import factuality

TIMEOUT_SECONDS = 180

absolute_config_filename = os.sep.join(
    (os.path.dirname(os.path.realpath(__file__)), "config.cfg")
)
config = Config().from_disk(absolute_config_filename)
composition_config_dict = config["composition"]
data_config_dict = config["data"]

logger = logging.getLogger(__name__)


class Manager:
    """The facade class for the semantic composer.

    Parameters:

    dependency_classes -- a *DependencyClassTable*. Defaults to *None*, in which case the
        table shipped with the package is used.
    argument_rules -- an *ArgumentRuleTable*. Defaults to *None*, in which case the table
        shipped with the package is used.
    categorization -- an *EmbeddingCategorization*. Defaults to *None*, in which case the
        default taxonomy is used.
    relation_definitions -- a list of *RelationDefinition* objects registered in addition to the
        default definitions, e.g. for domain-specific predicate types. A definition with the
        same type as a default definition replaces it. Defaults to *None*.
    lexicon -- a *Lexicon* used when composing spaCy documents. Defaults to *None*, in which
        case the lexicon shipped with the package is used.
    create_generic -- *True* if *GENERIC* predicates are to be synthesized on words without
        semantics. Defaults to *None*, in which case the configured value is used.
    create_if_exists -- *True* if new predications are to be composed on words that already
        carry relations. Defaults to *None*, in which case the configured value is used.
    number_of_workers -- the number of worker threads used by *compose_graphs()*, or *None* if
        the number of worker threads should depend on the number of available cores. Defaults
        to *None*.
    verbose -- a boolean value specifying whether worker messages should be outputted to the
        console. Defaults to *False*.
    """

    def __init__(
        self,
        *,
        dependency_classes: Optional[DependencyClassTable] = None,
        argument_rules: Optional[ArgumentRuleTable] = None,
        categorization: Optional[EmbeddingCategorization] = None,
        relation_definitions: Optional[List[RelationDefinition]] = None,
        lexicon: Optional[Lexicon] = None,
        create_generic: Optional[bool] = None,
        create_if_exists: Optional[bool] = None,
        number_of_workers: Optional[int] = None,
        verbose: bool = False
    ):
        self.verbose = verbose
        if dependency_classes is None:
            dependency_classes = load_dependency_classes(
                os.sep.join((DATA_DIRECTORY, data_config_dict["dependency_classes"]))
            )
        self.dependency_classes = dependency_classes
        if argument_rules is None:
            argument_rules = load_argument_rules(
                dependency_classes,
                os.sep.join((DATA_DIRECTORY, data_config_dict["argument_rules"])),
            )
        self.argument_rules = argument_rules
        if categorization is None:
            categorization = EmbeddingCategorization()
        self.categorization = categorization
        definitions = default_relation_definitions()
        if relation_definitions is not None:
            definitions.extend(relation_definitions)
        self.relation_definitions = RelationDefinitionRegistry(definitions, categorization)
        if lexicon is None:
            lexicon = load_lexicon(
                os.sep.join((DATA_DIRECTORY, data_config_dict["lexicon"]))
            )
        self.lexicon = lexicon
        self.create_generic = (
            composition_config_dict["create_generic"]
            if create_generic is None
            else create_generic
        )
        self.create_if_exists = (
            composition_config_dict["create_if_exists"]
            if create_if_exists is None
            else create_if_exists
        )
        if number_of_workers is None:
            number_of_workers = cpu_count()
        elif number_of_workers <= 0:
            raise ValueError("number_of_workers must be a positive integer.")
        self.number_of_workers = number_of_workers
        scope_argument_types = composition_config_dict["scope_argument_types"]
        self.scalar_modality_composer = ScalarModalityComposer(
            categorization, scope_argument_types
        )
        self.source_propagator = SourcePropagator(
            categorization, scope_argument_types, config["sources"]["introducing_tags"]
        )
        self.argument_identifier = ArgumentIdentifier(
            argument_rules,
            dependency_classes,
            categorization,
            self.relation_definitions,
            self.scalar_modality_composer,
            self.source_propagator,
            ArgumentPropagator(dependency_classes),
        )
        self.graph_builder = DocumentGraphBuilder(
            lexicon, config["parsing"]["raised_labels"]
        )
        self.lock = Lock()

    def compose(
        self, graph: DependencyGraph, semantic_graph: Optional[SemanticGraph] = None
    ) -> SemanticGraph:
        """Composes the predications of a dependency graph.

        Args:

        graph -- the *DependencyGraph* of a sentence.
        semantic_graph -- the *SemanticGraph* to add the predications to, e.g. the graph of the
            document the sentence belongs to. Defaults to *None*, in which case a new graph is
            created.
        """
        if semantic_graph is None:
            semantic_graph = SemanticGraph(graph.label)
        with graph.lock:
            roots = graph.roots()
            if len(roots) == 0 and len(graph) > 0:
                logger.warning(
                    "Graph %s has no root node. Starting from its first node.", graph.label
                )
                roots = graph.nodes()[:1]
            for root in roots:
                self.argument_identifier.identify(
                    root,
                    graph,
                    semantic_graph,
                    create_generic=self.create_generic,
                    create_if_exists=self.create_if_exists,
                )
        return semantic_graph

    def compose_doc(self, doc: Doc, label: str = "") -> SemanticGraph:
        """Composes the predications of a parsed spaCy document, sentence by sentence."""
        semantic_graph = SemanticGraph(label)
        for graph in self.graph_builder.build(doc, semantic_graph):
            self.compose(graph, semantic_graph)
        return semantic_graph

    def compose_graphs(
        self, graphs: List[DependencyGraph], number_of_workers: Optional[int] = None
    ) -> List[Optional[SemanticGraph]]:
        """Composes independent dependency graphs on worker threads.

        Returns one *SemanticGraph* per graph in the order of *graphs*. The entry for a graph
        whose composition failed or did not finish within *TIMEOUT_SECONDS* is *None*.
        """
        if number_of_workers is None:
            number_of_workers = self.number_of_workers
        elif number_of_workers <= 0:
            raise ValueError("number_of_workers must be a positive integer.")
        results: List[Optional[SemanticGraph]] = [None] * len(graphs)
        if len(graphs) == 0:
            return results
        input_queue: Queue = Queue()
        reply_queue: Queue = Queue()
        for index, graph in enumerate(graphs):
            input_queue.put((index, graph))
        number_of_workers = min(number_of_workers, len(graphs))
        for counter in range(number_of_workers):
            input_queue.put(None)
            worker_label = " ".join(("Worker", str(counter)))
            Thread(
                target=self._listen,
                args=(input_queue, reply_queue, worker_label),
                daemon=True,
            ).start()
        for _ in range(len(graphs)):
            try:
                worker_label, index, return_value, return_info = reply_queue.get(
                    timeout=TIMEOUT_SECONDS
                )
            except Empty:
                logger.warning(
                    "No composition result within %d seconds. Abandoning the remaining graphs.",
                    TIMEOUT_SECONDS,
                )
                break
            if isinstance(return_info, Exception):
                logger.error(
                    "Composing graph %s on %s failed: %s",
                    graphs[index].label,
                    worker_label,
                    return_info,
                )
                continue
            results[index] = return_value
            if self.verbose:
                with self.lock:
                    Printer().info(return_info)
        return results

    def _listen(self, input_queue: Queue, reply_queue: Queue, worker_label: str) -> None:
        while True:
            work_item = input_queue.get()
            if work_item is None:
                return
            index, graph = work_item
            try:
                semantic_graph = self.compose(graph)
                reply_queue.put(
                    (
                        worker_label,
                        index,
                        semantic_graph,
                        " ".join(
                            (
                                worker_label,
                                "composed graph",
                                graph.label,
                                "with",
                                str(len(semantic_graph.predications())),
                                "predications",
                            )
                        ),
                    )
                )
            except Exception as err:
                logger.exception("%s - error composing graph %s", worker_label, graph.label)
                reply_queue.put((worker_label, index, None, err))

    def factuality(self, predication: Predication) -> str:
        return factuality(predication)

    def debug_structures(self, semantic_graph: SemanticGraph) -> None:
        """Outputs the predications of *semantic_graph* to the console as a table."""
        msg = Printer()
        data = [
            (
                predication.id,
                predication.type,
                ", ".join(str(argument) for argument in predication.arguments),
                ", ".join(str(value) for value in predication.scalar_values),
                ", ".join(source.id for source in predication.sources),
                factuality(predication),
            )
            for predication in semantic_graph.predications()
        ]
        msg.table(
            data,
            header=("Id", "Type", "Arguments", "Scalar values", "Sources", "Factuality"),
            divider=True,
        )


@Language.factory(
    "semantic_composer",
    default_config={"create_generic": False, "create_if_exists": False},
)
class SemanticComposerBroker:
    """Pipeline component storing the *SemanticGraph* of each document on
    *doc._.semantic_graph*. Requires a tagger, a dependency parser and, for entities, a named
    entity recognizer earlier in the pipeline."""

    def __init__(
        self, nlp: Language, name: str, create_generic: bool, create_if_exists: bool
    ):
        self.nlp = nlp
        self.manager = Manager(
            create_generic=create_generic,
            create_if_exists=create_if_exists,
            number_of_workers=1,
        )
        self.set_extensions()

    def __call__(self, doc: Doc) -> Doc:
        doc._.set("semantic_graph", self.manager.compose_doc(doc))
        return doc

    @staticmethod
    def set_extensions():
        if not Doc.has_extension("semantic_graph"):
            Doc.set_extension("semantic_graph", default=None)
