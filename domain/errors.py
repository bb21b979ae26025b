"""Errors raised by the chefbot domain.

The HTTP layer maps each of these to a status code, so keep the hierarchy flat.
"""


class ChefbotError(Exception):
    pass


class ValidationError(ChefbotError):
    """Bad input from the client."""


class EmptyInputError(ValidationError):
    pass


class Unauthorized(ChefbotError):
    """No token was presented."""


class Forbidden(ChefbotError):
    """A token was presented but is invalid or expired."""


class ModelUnavailableError(ChefbotError):
    """The language model failed or returned nothing usable."""


class StoreError(ChefbotError):
    pass
