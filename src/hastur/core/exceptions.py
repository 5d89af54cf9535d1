"""Exception hierarchy for the Hastur client."""


class HasturError(Exception):
    """Base class for all Hastur client errors."""


class ConfigurationError(HasturError):
    """The UDP destination could not be resolved or connected."""


class EncodingError(HasturError):
    """A message holds a value that cannot be represented as JSON."""
