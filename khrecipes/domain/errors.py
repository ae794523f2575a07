class RecipeError(Exception):
    pass


class AuthFailure(RecipeError):
    """Missing or wrong passkey. The session has to log in again."""


class NetworkFailure(RecipeError):
    """The server could not be reached or answered with an error."""


class ParseFailure(RecipeError):
    """The model's answer did not contain a usable JSON object."""


class ValidationFailure(RecipeError):
    """Input rejected before anything is sent anywhere."""


class StorageError(RecipeError):
    pass
