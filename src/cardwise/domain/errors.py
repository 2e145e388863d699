class CardwiseError(Exception):
    pass


class ValidationError(CardwiseError):
    """Malformed request input. Raised before any value is computed."""


class SubscriptionRequiredError(CardwiseError):
    pass


class CardValueError(CardwiseError):
    """A single card cannot be valued; the rest of the catalog still can."""

    def __init__(self, card_id: str, message: str):
        super().__init__(message)
        self.card_id = card_id
        self.message = message


class ConfigurationError(CardValueError):
    pass


class CatalogIntegrityError(CardValueError):
    pass
