from typing import List, Optional, Callable, Iterable
import logging
from .semantics import (
    Interval,
    ScaleType,
    ScalarModalityValue,
    Predication,
    RELATION_KINDS,
)
from .rules import SCOPE_ARGUMENT_TYPES

logger = logging.getLogger(__name__)


def negate_value(value: float) -> float:
    if 0.0 < value <= 1.0:
        return 1.0 - value
    return 0.5


def increase_value(value: float) -> float:
    if value == 1.0 or value == 0.0:
        return value
    if value >= 0.5:
        return min(0.9, value + 0.2)
    return max(0.1, value - 0.2)


def lower_value(value: float) -> float:
    if value == 1.0 or value == 0.0:
        return value
    if value >= 0.5:
        return max(0.5, value - 0.2)
    return min(0.4, value + 0.2)


def hedge_value(value: float) -> float:
    if value == 1.0:
        return 0.8
    if value == 0.0:
        return 0.2
    return value


def compose_value(prior: float, value: float) -> float:
    """Combines a value on the epistemic scale with the prior value of an embedding
    predicate, e.g. *may* (0.5) applied to a fact (1.0) yields 0.5."""
    if value == 1.0:
        return prior
    if value == 0.0:
        return 1.0 - prior
    if value >= 0.5 and prior > value:
        return min(0.9, value + 0.2)
    if value > 0.5 and 0.5 <= prior <= value:
        return max(0.5, value - 0.2)
    if value > 0.5 and prior < 0.5:
        return 1.0 - value
    if value < 0.5 and prior >= 0.5:
        return value
    if value < 0.5 and prior < 0.5:
        return 1.0 - value
    return value


def transform_interval(transform: Callable[[float], float], interval: Interval) -> Interval:
    """Applies *transform* to both endpoints of *interval*, restoring their order."""
    return Interval.ordered(transform(interval.begin), transform(interval.end))


def compose_interval(prior: float, interval: Interval) -> Interval:
    return Interval.ordered(
        compose_value(prior, interval.begin), compose_value(prior, interval.end)
    )


# scale shifter type: transformation of values in its scope
SCALE_SHIFTS = {
    "NEGATOR": negate_value,
    "INTENSIFIER": increase_value,
    "DIMINISHER": lower_value,
    "HEDGE": hedge_value,
}


class ScalarModalityComposer:
    """Propagates the scalar modality value of a modal or scale-shifting predication to the
    predications within its scope.

    Args:

    categorization -- the *EmbeddingCategorization*.
    scope_argument_types -- the argument roles through which scope extends.
    """

    def __init__(
        self, categorization, scope_argument_types: Iterable[str] = SCOPE_ARGUMENT_TYPES
    ):
        self.categorization = categorization
        self.scope_argument_types = tuple(scope_argument_types)

    def modal_scale(self, predication: Predication) -> Optional[ScaleType]:
        predicate = predication.predicate
        if predicate is None:
            logger.warning(
                "Predication %s has no predicate. Unable to determine its modal scale.",
                predication.id,
            )
            return None
        if self.categorization.is_epistemic_scalar(predicate.type):
            return ScaleType.EPISTEMIC
        if self.categorization.is_deontic(predicate.type):
            return ScaleType.DEONTIC
        try:
            return ScaleType(predicate.type)
        except ValueError:
            logger.warning(
                "Modal type %s of predication %s has no corresponding scale.",
                predicate.type,
                predication.id,
            )
            return None

    def propagate(self, predication: Predication, semantic_graph) -> None:
        """Updates the scalar values of the predications within the scope of *predication*.
        Each predication is updated through the semantic graph that owns it, which may differ
        from *semantic_graph* for relations attached upstream."""
        if len(predication.arguments) == 0:
            logger.warning(
                "Predication %s has no arguments. Skipping scalar modality value propagation.",
                predication.id,
            )
            return
        predicate = predication.predicate
        if predicate is None:
            logger.warning(
                "Predication %s has no predicate. Skipping scalar modality value propagation.",
                predication.id,
            )
            return
        if predication.is_atomic or predication.is_generic:
            logger.debug("Predication %s is not embedding.", predication.id)
            return
        scale_shifter = self.categorization.is_scale_shifter(predicate.type)
        modal = self.categorization.is_modal(predicate.type)
        if not modal and not scale_shifter:
            logger.debug(
                "Predication %s is neither modal nor a scale shifter.", predication.id
            )
            return
        in_scope: List[Predication] = []
        sources = list(predication.sources)
        self._collect_scope(predication, predication, 0, sources, in_scope)
        if len(in_scope) == 0:
            logger.debug("Predication %s has no predication in scope.", predication.id)
            return
        logger.debug(
            "Predication %s has %d predications in scope.", predication.id, len(in_scope)
        )
        for child in in_scope:
            if child.owner is not semantic_graph:
                logger.debug(
                    "Predication %s in scope of %s belongs to semantic graph %s.",
                    child.id,
                    predication.id,
                    child.owner.label,
                )
        if modal:
            scale = self.modal_scale(predication)
            if scale is None:
                return
            for child in in_scope:
                self._update_modal_values(child, scale, predicate.prior_scalar_value)
        else:
            transform = SCALE_SHIFTS.get(predicate.type)
            if transform is None:
                return
            for child in in_scope:
                child.owner.set_scalar_values(
                    child,
                    [
                        ScalarModalityValue(
                            value.scale_type, transform_interval(transform, value.value)
                        )
                        for value in child.scalar_values
                    ],
                )

    def _update_modal_values(
        self, child: Predication, scale: ScaleType, prior: float
    ) -> None:
        scalar_values = child.scalar_values
        # only predications still carrying a single epistemic value are updated
        if len(scalar_values) != 1 or scalar_values[0].scale_type != ScaleType.EPISTEMIC:
            return
        if scale == ScaleType.EPISTEMIC:
            new_value = ScalarModalityValue(
                ScaleType.EPISTEMIC, compose_interval(prior, scalar_values[0].value)
            )
        else:
            new_value = ScalarModalityValue(scale, Interval(prior, prior))
        logger.debug("Setting scalar value of %s to %s.", child.id, new_value)
        child.owner.set_scalar_values(child, [new_value])

    def _scope_children(self, predication: Predication) -> List[Predication]:
        return [
            item
            for item in predication.arg_items(self.scope_argument_types)
            if item.kind in RELATION_KINDS
        ]

    def _collect_scope(
        self,
        embedding: Predication,
        current: Predication,
        intervening: int,
        sources: list,
        found: List[Predication],
    ) -> None:
        embedding_type = embedding.type
        scale_shifter = self.categorization.is_scale_shifter(embedding_type)
        epistemic = self.categorization.is_epistemic_scalar(embedding_type)
        for child in self._scope_children(current):
            child_type = child.type
            if child_type is None:
                logger.warning(
                    "Predication %s has child predication %s without predicate. Skipping.",
                    embedding.id,
                    child.id,
                )
                continue
            if len(sources) >= 2 and any(source in sources for source in child.sources):
                continue
            sources.extend(child.sources)
            if scale_shifter:
                if self.categorization.is_scale_shifter(child_type) or (
                    self.categorization.is_modal(child_type) and intervening <= 1
                ):
                    self._add_to_scope(child, found)
                    self._collect_scope(embedding, child, intervening, sources, found)
                elif intervening < 1:
                    self._add_to_scope(child, found)
            elif epistemic:
                if self.categorization.is_epistemic_scalar(
                    child_type
                ) or self.categorization.is_scale_shifter(child_type):
                    self._add_to_scope(child, found)
                    self._collect_scope(embedding, child, intervening, sources, found)
                elif intervening < 1:
                    self._add_to_scope(child, found)
            else:
                if self.categorization.is_scale_shifter(child_type):
                    self._add_to_scope(child, found)
                    self._collect_scope(embedding, child, intervening, sources, found)
                elif intervening < 1:
                    self._add_to_scope(child, found)
                    self._collect_scope(
                        embedding, child, intervening + 1, sources, found
                    )

    def _add_to_scope(self, child: Predication, found: List[Predication]) -> None:
        if child not in found:
            found.append(child)
