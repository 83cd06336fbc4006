"""Error taxonomy shared by the wizard, the wish view and the HTTP layer."""


class WishmakerError(Exception):
    """Base class for all domain errors."""


class TransportError(WishmakerError):
    """A fetch, save or generate call failed or timed out."""


class GreetingGenerationError(TransportError):
    pass


class PersistError(TransportError):
    pass


class SlugCollisionError(PersistError):
    """Every generated slug for a wish was already taken."""


class DataIntegrityError(WishmakerError):
    """A stored record does not match the schema this service understands."""


class ValidationBlockedError(WishmakerError):
    """An action was forced while its precondition does not hold."""


class WizardStateError(WishmakerError):
    """An action is not available in the wizard's current step."""
