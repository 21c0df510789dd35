class ComposerError(Exception):
    def __init__(self, text):
        self.text = text

    def __str__(self):
        return self.text


class InvalidIntervalError(ComposerError):
    pass


class DuplicateNodeError(ComposerError):
    pass


class NodeNotFoundError(ComposerError):
    pass


class ForeignPredicationError(ComposerError):
    pass


class InvalidRuleTableError(ComposerError):
    pass


class UnknownEmbeddingCategoryError(ComposerError):
    pass


class InvalidSenseError(ComposerError):
    pass
