from typing import List, Optional, Tuple, Iterable, Union
from enum import Enum
from .errors import InvalidIntervalError, InvalidSenseError

GENERIC = "GENERIC"
NEGATOR = "NEGATOR"
SOURCE_GENERIC = "SOURCE_GENERIC"


class SemanticItemKind(Enum):
    ENTITY = "Entity"
    PREDICATE = "Predicate"
    PREDICATION = "Predication"
    CONJUNCTION = "Conjunction"


# items that are anchored to text directly
TERM_KINDS = frozenset((SemanticItemKind.ENTITY, SemanticItemKind.PREDICATE))
# items that are composed from other items
RELATION_KINDS = frozenset((SemanticItemKind.PREDICATION, SemanticItemKind.CONJUNCTION))


class ScopeType(Enum):
    DEFAULT = "DEFAULT"
    WIDE = "WIDE"
    NARROW = "NARROW"


class SpanList:
    """One or more character spans making up a possibly discontinuous textual unit.

    spans -- a list of *(begin, end)* tuples with *end* exclusive.
    """

    def __init__(self, spans: List[Tuple[int, int]]):
        if len(spans) == 0:
            raise ValueError("SpanList requires at least one span")
        for begin, end in spans:
            if begin > end:
                raise ValueError(
                    "".join(("Invalid span ", str(begin), "-", str(end)))
                )
        self.spans = sorted(spans)

    @property
    def begin(self) -> int:
        return self.spans[0][0]

    @property
    def end(self) -> int:
        return self.spans[-1][1]

    @property
    def length(self) -> int:
        return sum(end - begin for begin, end in self.spans)

    def subsumes(self, other: "SpanList") -> bool:
        """*True* if every span of *other* lies within one of the spans of this list."""
        for other_begin, other_end in other.spans:
            if not any(
                begin <= other_begin and other_end <= end for begin, end in self.spans
            ):
                return False
        return True

    def overlaps(self, other: "SpanList") -> bool:
        for begin, end in self.spans:
            for other_begin, other_end in other.spans:
                if begin < other_end and other_begin < end:
                    return True
        return False

    def union(self, other: Optional["SpanList"]) -> "SpanList":
        if other is None:
            return self
        merged: List[Tuple[int, int]] = []
        for begin, end in sorted(self.spans + other.spans):
            if len(merged) > 0 and begin <= merged[-1][1]:
                merged[-1] = (merged[-1][0], max(end, merged[-1][1]))
            else:
                merged.append((begin, end))
        return SpanList(merged)

    def __eq__(self, other) -> bool:
        return isinstance(other, SpanList) and self.spans == other.spans

    def __hash__(self) -> int:
        return hash(tuple(self.spans))

    def __str__(self) -> str:
        return ",".join(
            "-".join((str(begin), str(end))) for begin, end in self.spans
        )


def span(begin: int, end: int) -> SpanList:
    """Convenience function to create a single-span *SpanList*."""
    return SpanList([(begin, end)])


class Interval:
    """A closed sub-interval of [0,1] expressing a scalar modality value.

    Raises *InvalidIntervalError* if the endpoints are outside [0,1] or reversed.
    """

    def __init__(self, begin: float, end: float):
        if not (0.0 <= begin <= end <= 1.0):
            raise InvalidIntervalError(
                "".join(("Invalid interval [", str(begin), ",", str(end), "]"))
            )
        self.begin = begin
        self.end = end

    @staticmethod
    def ordered(first: float, second: float) -> "Interval":
        if first > second:
            return Interval(second, first)
        return Interval(first, second)

    @property
    def length(self) -> float:
        return self.end - self.begin

    @property
    def midpoint(self) -> float:
        return (self.begin + self.end) / 2

    def subsumes(self, other: "Interval") -> bool:
        return self == other or (
            self.length > other.length
            and self.begin <= other.begin
            and other.end <= self.end
        )

    def overlaps(self, other: "Interval") -> bool:
        return self.subsumes(other) or (
            other.begin <= self.begin < other.end
            or other.begin < self.end <= other.end
        )

    def at_left(self, other: "Interval") -> bool:
        """*True* if this interval ends before *other* begins."""
        return self.end < other.begin

    def union(self, other: "Interval") -> "Interval":
        return Interval(min(self.begin, other.begin), max(self.end, other.end))

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Interval)
            and self.begin == other.begin
            and self.end == other.end
        )

    def __hash__(self) -> int:
        return hash((self.begin, self.end))

    def __str__(self) -> str:
        if self.begin == self.end:
            return str(self.begin)
        return ":".join((str(self.begin), str(self.end)))


class ScaleType(Enum):
    EPISTEMIC = "EPISTEMIC"
    DEONTIC = "DEONTIC"
    POTENTIAL = "POTENTIAL"
    VOLITIVE = "VOLITIVE"
    INTERROGATIVE = "INTERROGATIVE"
    SUCCESS = "SUCCESS"
    INTENTIONAL = "INTENTIONAL"
    EVALUATIVE = "EVALUATIVE"


class ScalarModalityValue:
    """An immutable pairing of a modality scale with a value interval on that scale."""

    def __init__(self, scale_type: ScaleType, value: Interval):
        self.scale_type = scale_type
        self.value = value

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, ScalarModalityValue)
            and self.scale_type == other.scale_type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.scale_type, self.value))

    def __str__(self) -> str:
        return ":".join((self.scale_type.value, str(self.value)))

    def __repr__(self) -> str:
        return "".join(("ScalarModalityValue(", str(self), ")"))


DEFAULT_SCALAR_VALUE = ScalarModalityValue(ScaleType.EPISTEMIC, Interval(1.0, 1.0))


class Sense:
    """A dictionary sense of a word that triggers a predicate.

    Args:

    category -- the embedding category of the sense, e.g. *SPECULATIVE* or *NEGATOR*, or a
        domain-specific relation type. Predicates created from the sense take this as their type.
    prior_scalar_value -- the degree of certainty, obligation etc. the sense expresses on its
        modality scale. Defaults to *1.0*.
    embedding_types -- the high-level dependency classes (see *DependencyClassTable*), or raw
        dependency labels, whose dependents fill the *COMP* role of the predicate.
    scope_type -- a *ScopeType*.
    inverse -- *True* if the *SUBJ* and *COMP* roles are to be swapped when the *COMP* role has
        been assigned from *embedding_types*.
    discourse_connective -- *True* if the sense links two discourse units.
    probability -- the probability of this sense among the senses of the same word.
    argument_rules -- a list of *ArgumentRule* objects consulted before the default rules.
    pos -- the tag prefix the word must have for the sense to apply, or *None*.
    features -- further information about the sense.
    """

    def __init__(
        self,
        category: str,
        *,
        prior_scalar_value: float = 1.0,
        embedding_types: Optional[List[str]] = None,
        scope_type: ScopeType = ScopeType.DEFAULT,
        inverse: bool = False,
        discourse_connective: bool = False,
        probability: float = 1.0,
        argument_rules: Optional[list] = None,
        pos: Optional[str] = None,
        features: Optional[dict] = None
    ):
        if category is None or len(category.strip()) == 0:
            raise InvalidSenseError("Sense requires a category")
        if not (0.0 <= prior_scalar_value <= 1.0):
            raise InvalidSenseError(
                "".join(
                    (
                        "Prior scalar value ",
                        str(prior_scalar_value),
                        " for sense ",
                        category,
                        " is outside [0,1]",
                    )
                )
            )
        self.category = category
        self.prior_scalar_value = prior_scalar_value
        self.embedding_types = embedding_types
        self.scope_type = scope_type
        self.inverse = inverse
        self.discourse_connective = discourse_connective
        self.probability = probability
        self.argument_rules = argument_rules
        self.pos = pos
        self.features = features if features is not None else {}

    def is_embedding(self, categorization) -> bool:
        return categorization.is_embedding(self.category)

    def is_discourse_connective(self, categorization) -> bool:
        return self.discourse_connective or categorization.is_relational(self.category)

    def is_atomic(self, categorization) -> bool:
        return not self.is_embedding(categorization)

    def __str__(self) -> str:
        return "".join((self.category, "(", str(self.prior_scalar_value), ")"))


class Entity:
    """A semantic item denoting a thing mentioned in the text."""

    kind = SemanticItemKind.ENTITY

    def __init__(
        self,
        id: str,
        type: str,
        span: Optional[SpanList] = None,
        text: str = "",
        node_id=None,
    ):
        self.id = id
        self.type = type
        self.span = span
        self.text = text
        self.node_id = node_id

    def __str__(self) -> str:
        return "".join((self.id, ":", self.type, "(", self.text, ")"))

    def __repr__(self) -> str:
        return str(self)


# the default source of every predication
SOURCE_WRITER = Entity("WRITER", "SOURCE_WRITER", text="WRITER")


class Predicate:
    """A semantic item triggering a relation, anchored to a textual unit.

    tag -- the fine-grained part-of-speech tag of the textual unit.
    sense -- the *Sense* the predicate was created from, or *None*.
    """

    kind = SemanticItemKind.PREDICATE

    def __init__(
        self,
        id: str,
        type: str,
        span: Optional[SpanList] = None,
        text: str = "",
        node_id=None,
        tag: str = "",
        sense: Optional[Sense] = None,
    ):
        self.id = id
        self.type = type
        self.span = span
        self.text = text
        self.node_id = node_id
        self.tag = tag
        self.sense = sense

    @property
    def prior_scalar_value(self) -> float:
        if self.sense is None:
            return 1.0
        return self.sense.prior_scalar_value

    def __str__(self) -> str:
        return "".join((self.id, ":", self.type, "(", self.text, ")"))

    def __repr__(self) -> str:
        return str(self)


class Argument:
    """A semantic item filling a role within a predication."""

    def __init__(self, role: str, item):
        self.role = role
        self.item = item

    def with_role(self, role: str) -> "Argument":
        return Argument(role, self.item)

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Argument)
            and self.role == other.role
            and self.item is other.item
        )

    def __hash__(self) -> int:
        return hash((self.role, id(self.item)))

    def __str__(self) -> str:
        return "".join((self.role, "=", self.item.id))

    def __repr__(self) -> str:
        return str(self)


class Predication:
    """A relation composed from a predicate and its arguments.

    Predications are created and updated exclusively by the *SemanticGraph* that owns them:
    *scalar_values* and *sources* are read-only views.
    """

    kind = SemanticItemKind.PREDICATION

    def __init__(self, id: str, predicate: Predicate, arguments: Iterable[Argument], owner):
        self.id = id
        self.predicate = predicate
        self.arguments = tuple(arguments)
        self._owner = owner
        self._scalar_values = [DEFAULT_SCALAR_VALUE]
        self._sources = [SOURCE_WRITER]

    @property
    def type(self) -> Optional[str]:
        if self.predicate is None:
            return None
        return self.predicate.type

    @property
    def node_id(self):
        if self.predicate is None:
            return None
        return self.predicate.node_id

    @property
    def owner(self):
        return self._owner

    @property
    def scalar_values(self) -> Tuple[ScalarModalityValue, ...]:
        return tuple(self._scalar_values)

    @property
    def sources(self) -> tuple:
        return tuple(self._sources)

    @property
    def span(self) -> Optional[SpanList]:
        working_span = self.predicate.span if self.predicate is not None else None
        for argument in self.arguments:
            argument_span = argument.item.span
            if working_span is None:
                working_span = argument_span
            elif argument_span is not None:
                working_span = working_span.union(argument_span)
        return working_span

    @property
    def is_atomic(self) -> bool:
        return not any(
            argument.item.kind in RELATION_KINDS for argument in self.arguments
        )

    @property
    def is_generic(self) -> bool:
        return self.type == GENERIC

    def args(self, roles: Union[str, Iterable[str], None] = None) -> List[Argument]:
        if roles is None:
            return list(self.arguments)
        if isinstance(roles, str):
            roles = (roles,)
        return [argument for argument in self.arguments if argument.role in roles]

    def arg_items(self, roles: Union[str, Iterable[str], None] = None) -> list:
        return [argument.item for argument in self.args(roles)]

    def arg_names(self) -> List[str]:
        return [argument.role for argument in self.arguments]

    def __str__(self) -> str:
        return "".join(
            (
                self.id,
                ":",
                str(self.type),
                "(",
                ", ".join(str(argument) for argument in self.arguments),
                ")_",
                "_".join(str(value) for value in self._scalar_values),
            )
        )

    def __repr__(self) -> str:
        return str(self)


class Conjunction(Predication):
    """A predication coordinating its arguments, all of which have the role *CC*."""

    kind = SemanticItemKind.CONJUNCTION
