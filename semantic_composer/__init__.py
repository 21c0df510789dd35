import logging
logging.getLogger("rdflib").setLevel(logging.WARNING) # avoid INFO console message on startup
from semantic_composer.manager import Manager
from semantic_composer.manager import SemanticComposerBroker
from semantic_composer.graph import Node, DependencyGraph
from semantic_composer.semantic_graph import SemanticGraph
from semantic_composer.categorization import EmbeddingCategorization
from semantic_composer.relations import RelationArgument, RelationDefinition
from semantic_composer.lexicon import Lexicon
from semantic_composer.semantics import (
    Sense,
    Argument,
    Interval,
    ScaleType,
    ScalarModalityValue,
    SemanticItemKind,
    SpanList,
)
