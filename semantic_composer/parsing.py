from typing import List, Dict, Tuple, Optional, Iterable
import logging
from spacy.tokens import Doc, Span, Token
from .graph import Node, DependencyGraph
from .semantics import SpanList, SemanticItemKind

logger = logging.getLogger(__name__)

# dependencies whose dependents are raised above their governors when they trigger predicates
RAISED_LABELS = ("aux", "auxpass", "neg", "advmod")

# dependencies that are collapsed into the dependency of a preposition
PREPOSITION_OBJECT_LABELS = {"pobj": "prep_", "pcomp": "prepc_"}


class DocumentGraphBuilder:
    """Converts the dependency parse of a spaCy document into one *DependencyGraph* per
    sentence, attaching named entities and lexicon senses to the nodes.

    Prepositions are collapsed into the dependencies they introduce, e.g. *X -prep-> of
    -pobj-> Y* becomes *X -prep_of-> Y*. Modifiers that trigger predicates, e.g. *may* or
    *not*, are raised above the words they modify so that their predicates take the modified
    words as arguments.

    Args:

    lexicon -- the *Lexicon* used to look up senses.
    raised_labels -- the labels of the dependencies whose dependents are raised.
    """

    def __init__(self, lexicon, raised_labels: Iterable[str] = RAISED_LABELS):
        self.lexicon = lexicon
        self.raised_labels = tuple(raised_labels)

    def build(self, doc: Doc, semantic_graph) -> List[DependencyGraph]:
        graphs = []
        for sentence_index, sentence in enumerate(doc.sents):
            label = "".join((semantic_graph.label, "S", str(sentence_index + 1)))
            graphs.append(self.build_sentence(doc, sentence, semantic_graph, label))
        return graphs

    def build_sentence(
        self, doc: Doc, sentence: Span, semantic_graph, label: str = ""
    ) -> DependencyGraph:
        graph = DependencyGraph(label)
        collapsed = [token.i for token in sentence if self._is_collapsed_preposition(token)]
        for token in sentence:
            if token.i in collapsed:
                continue
            graph.add_node(
                Node(
                    token.i,
                    token.text,
                    token.lemma_.lower() if len(token.lemma_) > 0 else token.lower_,
                    token.tag_,
                    SpanList([(token.idx, token.idx + len(token))]),
                )
            )
        parents: Dict[int, Tuple[int, str]] = {}
        for token in sentence:
            if token.i in collapsed or token.head.i == token.i:
                continue
            parents[token.i] = self._collapsed_dependency(token, collapsed)
        self._attach_entities(doc, sentence, graph, semantic_graph)
        self._attach_predicates(graph, semantic_graph)
        for token in sentence:
            if token.i not in collapsed:
                self._raise_modifiers(token.i, graph, parents)
        for child_index, (parent_index, dependency_label) in parents.items():
            graph.add_edge(parent_index, child_index, dependency_label)
        return graph

    def _is_collapsed_preposition(self, token: Token) -> bool:
        return token.dep_ == "prep" and any(
            child.dep_ in PREPOSITION_OBJECT_LABELS for child in token.children
        )

    def _collapsed_dependency(self, token: Token, collapsed: List[int]) -> Tuple[int, str]:
        head = token.head
        if head.i not in collapsed:
            return head.i, token.dep_
        if token.dep_ in PREPOSITION_OBJECT_LABELS:
            dependency_label = "".join(
                (PREPOSITION_OBJECT_LABELS[token.dep_], head.lower_)
            )
        else:
            dependency_label = token.dep_
        # skip chains of collapsed prepositions, e.g. 'out of'
        while head.i in collapsed and head.head.i != head.i:
            head = head.head
        return head.i, dependency_label

    def _attach_entities(
        self, doc: Doc, sentence: Span, graph: DependencyGraph, semantic_graph
    ) -> None:
        for ent in doc.ents:
            if ent.start < sentence.start or ent.end > sentence.end:
                continue
            if not graph.has_node(ent.root.i):
                logger.warning(
                    "Entity %s has no node in graph %s. Skipping.", ent.text, graph.label
                )
                continue
            entity = semantic_graph.new_entity(
                ent.label_,
                SpanList([(ent.start_char, ent.end_char)]),
                ent.text,
                ent.root.i,
            )
            graph.node(ent.root.i).semantics.append(entity)

    def _attach_predicates(self, graph: DependencyGraph, semantic_graph) -> None:
        for node in graph.nodes():
            sense = self.lexicon.most_probable_sense(node.lemma, node.tag)
            if sense is None:
                continue
            predicate = semantic_graph.new_predicate(
                sense.category, node.span, node.text, node.id, node.tag, sense
            )
            logger.debug("Attached predicate %s to node %s.", predicate, node.id)
            node.semantics.append(predicate)

    def _triggers_predicate(self, node: Node) -> bool:
        return any(item.kind is SemanticItemKind.PREDICATE for item in node.semantics)

    def _raise_modifiers(
        self, head_index: int, graph: DependencyGraph, parents: Dict[int, Tuple[int, str]]
    ) -> None:
        """Inserts the raised modifiers of a word between the word and its governor, the
        rightmost modifier directly above the word, e.g. *may -aux-> not -neg-> bind*."""
        modifiers = [
            child_index
            for child_index, (parent_index, dependency_label) in sorted(parents.items())
            if parent_index == head_index
            and dependency_label in self.raised_labels
            and self._triggers_predicate(graph.node(child_index))
        ]
        if len(modifiers) == 0:
            return
        governor: Optional[Tuple[int, str]] = parents.get(head_index)
        top_index = head_index
        for modifier_index in reversed(modifiers):
            parents[top_index] = (modifier_index, parents[modifier_index][1])
            top_index = modifier_index
        if governor is None:
            del parents[top_index]
        else:
            parents[top_index] = governor
