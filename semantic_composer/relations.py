from typing import List, Optional, Iterable, Dict
import logging
from .semantics import SemanticItemKind, RELATION_KINDS, Argument
from .errors import UnknownEmbeddingCategoryError

logger = logging.getLogger(__name__)

ENTITY_OR_RELATION_KINDS = RELATION_KINDS | {SemanticItemKind.ENTITY}


class RelationArgument:
    """A role within a relation definition.

    Args:

    role -- the name of the role, e.g. *SUBJ*.
    kinds -- the *SemanticItemKind* values of items that may fill the role.
    types -- the semantic types of items that may fill the role, or *None* if any type is
        acceptable.
    multiple -- *True* if more than one argument may have this role within a predication.
    """

    def __init__(
        self,
        role: str,
        kinds: Iterable[SemanticItemKind],
        types: Optional[Iterable[str]] = None,
        multiple: bool = False,
    ):
        self.role = role
        self.kinds = frozenset(kinds)
        self.types = frozenset(types) if types is not None else None
        self.multiple = multiple

    def satisfied_by(self, item) -> bool:
        if item.kind not in self.kinds:
            return False
        return self.types is None or item.type in self.types


class RelationDefinition:
    """The role schema of a relation type.

    type -- the predicate type or embedding category the definition applies to. A definition
        for an embedding category also applies to all of its descendant categories unless they
        have a definition of their own.
    core_arguments -- the roles that must be filled.
    optional_arguments -- the roles that may be filled.
    full_name -- an alternative name by which the definition can be looked up.
    """

    def __init__(
        self,
        type: str,
        core_arguments: List[RelationArgument],
        optional_arguments: Optional[List[RelationArgument]] = None,
        full_name: Optional[str] = None,
    ):
        self.type = type
        self.core_arguments = core_arguments
        self.optional_arguments = (
            optional_arguments if optional_arguments is not None else []
        )
        self.full_name = full_name

    def _relation_arguments(self, role: str) -> List[RelationArgument]:
        return [
            relation_argument
            for relation_argument in self.core_arguments + self.optional_arguments
            if relation_argument.role == role
        ]

    def arg_satisfies_role(self, role: str, item) -> bool:
        return any(
            relation_argument.satisfied_by(item)
            for relation_argument in self._relation_arguments(role)
        )

    def multiple_arguments_allowed(self, role: str) -> bool:
        return any(
            relation_argument.multiple
            for relation_argument in self._relation_arguments(role)
        )

    def violates_multiple_role_constraint(self, arguments: List[Argument]) -> List[str]:
        """Returns the roles, in order of first appearance, that are filled more than once
        although the definition does not allow it."""
        violating_roles: List[str] = []
        for argument in arguments:
            role = argument.role
            if role in violating_roles or self.multiple_arguments_allowed(role):
                continue
            if len([other for other in arguments if other.role == role]) > 1:
                violating_roles.append(role)
        return violating_roles

    def core_args_resolved(self, arguments: List[Argument]) -> bool:
        if len(arguments) == 0:
            return False
        roles = [argument.role for argument in arguments]
        return all(
            relation_argument.role in roles for relation_argument in self.core_arguments
        )

    def __str__(self) -> str:
        return "".join(
            (
                self.type,
                "(",
                ", ".join(
                    relation_argument.role for relation_argument in self.core_arguments
                ),
                ")",
            )
        )


def default_relation_definitions() -> List[RelationDefinition]:
    """Definitions for the top-level embedding categories and for conjunctions."""
    return [
        RelationDefinition(
            "MODAL",
            [RelationArgument("COMP", RELATION_KINDS)],
            [RelationArgument("SUBJ", ENTITY_OR_RELATION_KINDS)],
        ),
        RelationDefinition(
            "VALENCE_SHIFTER", [RelationArgument("COMP", RELATION_KINDS)]
        ),
        RelationDefinition(
            "RELATIONAL",
            [
                RelationArgument("COMP", ENTITY_OR_RELATION_KINDS),
                RelationArgument("SUBJ", ENTITY_OR_RELATION_KINDS),
            ],
        ),
        RelationDefinition(
            "PROPOSITIONAL",
            [
                RelationArgument("COMP", ENTITY_OR_RELATION_KINDS),
                RelationArgument("SUBJ", ENTITY_OR_RELATION_KINDS),
            ],
        ),
        RelationDefinition(
            "CONJUNCTION",
            [RelationArgument("CC", ENTITY_OR_RELATION_KINDS, multiple=True)],
        ),
    ]


class RelationDefinitionRegistry:
    """Looks up relation definitions by predicate type.

    A type without a definition of its own inherits the definition of its nearest ancestor
    within the embedding categorization.

    definitions -- the definitions to register.
    categorization -- the *EmbeddingCategorization* used for inheritance.
    """

    def __init__(self, definitions: List[RelationDefinition], categorization):
        self.categorization = categorization
        self._definitions: Dict[str, RelationDefinition] = {}
        for definition in definitions:
            self._definitions[definition.type] = definition
            if definition.full_name is not None:
                self._definitions[definition.full_name] = definition

    def lookup(self, type: str) -> Optional[RelationDefinition]:
        if type in self._definitions:
            return self._definitions[type]
        try:
            ancestors = self.categorization.ancestors(type)
        except UnknownEmbeddingCategoryError:
            logger.debug("No relation definition for type %s.", type)
            return None
        for ancestor in ancestors:
            if ancestor in self._definitions:
                return self._definitions[ancestor]
        return None

    def __contains__(self, type: str) -> bool:
        return self.lookup(type) is not None
