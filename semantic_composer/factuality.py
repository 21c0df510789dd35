from .semantics import Interval, ScaleType, Predication

FACT = "Fact"
PROBABLE = "Probable"
POSSIBLE = "Possible"
DOUBTFUL = "Doubtful"
COUNTERFACT = "Counterfact"
UNCOMMITTED = "Uncommitted"

L3 = Interval(1.0, 1.0)
L2 = Interval(0.65, 0.99)
L1 = Interval(0.26, 0.64)
L0 = Interval(0.0, 0.0)
NEG = Interval(0.0, 0.25)


def _certainty_level(value: Interval, default: str) -> str:
    if L3.subsumes(value):
        return FACT
    if L2.subsumes(value):
        return PROBABLE
    if L1.subsumes(value):
        return POSSIBLE
    if NEG.subsumes(value) and value.begin > 0.0:
        return DOUBTFUL
    if L0.subsumes(value):
        return COUNTERFACT
    return default


def factuality(predication: Predication) -> str:
    """Maps the first scalar modality value of *predication* to one of the factuality levels
    *Fact*, *Probable*, *Possible*, *Doubtful*, *Counterfact* and *Uncommitted*. Values that fall
    between the levels, and predications without values, are considered *Fact*."""
    scalar_values = predication.scalar_values
    if len(scalar_values) == 0:
        return FACT
    scale_type = scalar_values[0].scale_type
    value = scalar_values[0].value
    if scale_type == ScaleType.POTENTIAL:
        return COUNTERFACT if L0.subsumes(value) else PROBABLE
    if scale_type in (ScaleType.EPISTEMIC, ScaleType.SUCCESS):
        return _certainty_level(value, FACT)
    if scale_type == ScaleType.INTERROGATIVE:
        if L3.subsumes(value):
            return UNCOMMITTED
        if L0.subsumes(value):
            return COUNTERFACT
        return FACT
    if scale_type == ScaleType.DEONTIC and L2.at_left(value):
        return UNCOMMITTED
    return FACT
