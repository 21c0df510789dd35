from typing import List, Dict, Optional, Iterable
import logging
import os
import srsly
from .semantics import Sense, ScopeType
from .rules import DATA_DIRECTORY, argument_rule_from_dict
from .errors import InvalidSenseError

logger = logging.getLogger(__name__)


class Lexicon:
    """Maps lemmas to the senses of the predicates they trigger.

    entries -- a dictionary from lemmas to lists of *Sense* objects, most probable sense
        first.
    """

    def __init__(self, entries: Optional[Dict[str, List[Sense]]] = None):
        self._entries: Dict[str, List[Sense]] = {}
        if entries is not None:
            for lemma, senses in entries.items():
                for sense in senses:
                    self.add(lemma, sense)

    def add(self, lemma: str, sense: Sense) -> None:
        self._entries.setdefault(lemma.lower(), []).append(sense)

    def senses(self, lemma: str, tag: Optional[str] = None) -> List[Sense]:
        """Returns the senses of *lemma* applicable to a word with the part-of-speech tag
        *tag*, or all senses of *lemma* if *tag* is *None*."""
        senses = self._entries.get(lemma.lower(), [])
        if tag is None:
            return list(senses)
        return [
            sense for sense in senses if sense.pos is None or tag.startswith(sense.pos)
        ]

    def most_probable_sense(self, lemma: str, tag: Optional[str] = None) -> Optional[Sense]:
        senses = self.senses(lemma, tag)
        if len(senses) == 0:
            return None
        # max() returns the first of several senses with equal probability
        return max(senses, key=lambda sense: sense.probability)

    def lemmas(self) -> List[str]:
        return sorted(self._entries.keys())

    def __contains__(self, lemma: str) -> bool:
        return lemma.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def sense_from_dict(entry: dict, source: str = "") -> Sense:
    try:
        category = entry["category"]
    except KeyError:
        raise InvalidSenseError("".join(("Sense in ", source, " lacks field 'category'")))
    try:
        scope_type = ScopeType(entry.get("scope_type", "DEFAULT"))
    except ValueError:
        raise InvalidSenseError(
            "".join(("Sense ", category, " in ", source, " has an invalid scope type"))
        )
    argument_rules = entry.get("argument_rules")
    if argument_rules is not None:
        argument_rules = [
            argument_rule_from_dict(rule_entry, source) for rule_entry in argument_rules
        ]
    return Sense(
        category,
        prior_scalar_value=entry.get("prior_scalar_value", 1.0),
        embedding_types=entry.get("embedding_types"),
        scope_type=scope_type,
        inverse=entry.get("inverse", False),
        discourse_connective=entry.get("discourse_connective", False),
        probability=entry.get("probability", 1.0),
        argument_rules=argument_rules,
        pos=entry.get("pos"),
        features=entry.get("features"),
    )


def load_lexicon(path: Optional[str] = None) -> Lexicon:
    """Loads a lexicon from a JSON file mapping lemmas to lists of senses, by default the
    lexicon shipped with the package."""
    if path is None:
        path = os.sep.join((DATA_DIRECTORY, "lexicon.json"))
    entries = srsly.read_json(path)
    if not isinstance(entries, dict):
        raise InvalidSenseError("".join(("Lexicon ", path, " must contain a JSON object")))
    lexicon = Lexicon()
    for lemma, sense_entries in entries.items():
        if not isinstance(sense_entries, list):
            raise InvalidSenseError(
                "".join(("Entry for ", lemma, " in ", path, " must be a list of senses"))
            )
        for sense_entry in sense_entries:
            lexicon.add(lemma, sense_from_dict(sense_entry, path))
    logger.debug("Loaded %d lemmas from %s.", len(lexicon), path)
    return lexicon


def merge_lexicons(lexicons: Iterable[Lexicon]) -> Lexicon:
    merged = Lexicon()
    for lexicon in lexicons:
        for lemma in lexicon.lemmas():
            for sense in lexicon.senses(lemma):
                merged.add(lemma, sense)
    return merged
