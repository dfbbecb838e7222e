"""A collection of maintain-specific exceptions."""

import logging

logger = logging.getLogger(__name__)


class MaintainError(Exception):
    """Base class for maintain exceptions."""

    error_code = 1

    def __init__(self, message="An unhandled exception occured!"):
        # Log the exception if the logger is set to DEBUG
        if logger.isEnabledFor(logging.DEBUG) and isinstance(message, Exception):
            logger.exception(message)
        self.message = message
        super().__init__(message)
        logger.error(f"{self.__class__.__name__}: {self.message}")


class ConfigurationError(MaintainError):
    """Raised when a maintain configuration error occurs."""

    error_code = 2


class ParameterError(MaintainError):
    """Raised when supplied scenario parameters do not match their declarations."""

    error_code = 3


class MissingParameterError(ParameterError):
    """Raised when a required scenario parameter has no value."""

    def __init__(self, name, scenario=None):
        self.name = name
        where = f" for scenario '{scenario}'" if scenario else ""
        super().__init__(message=f"Missing required parameter '{name}'{where}")


class TypeMismatchError(ParameterError):
    """Raised when a parameter value has the wrong shape (array vs scalar)."""

    def __init__(self, name, expected, value):
        self.name = name
        self.expected = expected
        self.value = value
        super().__init__(
            message=f"Parameter '{name}' expects {expected}, got {type(value).__name__}: {value!r}"
        )


class CompositionError(MaintainError):
    """Raised when a scenario cannot compose its step list."""

    error_code = 4


class UnsupportedStrategyError(CompositionError):
    """Raised when a backup strategy other than online/offline is requested."""

    def __init__(self, strategy):
        self.strategy = strategy
        super().__init__(message=f"Unsupported strategy '{strategy}'")


class ContextLockedError(CompositionError):
    """Raised when the run context is modified after composition started."""


class ProcedureError(MaintainError):
    """Raised when a procedure-level error occurs."""

    error_code = 5

    def __init__(self, kind=None, message="Unspecified exception"):
        self.kind = kind
        if kind:
            message = f"{kind}: {message}"
        super().__init__(message=message)


class ProcedureNotFoundError(ProcedureError):
    """Raised when no procedure is registered for a kind or logical identifier."""


class CapabilityError(MaintainError):
    """Raised when a capability lookup cannot answer a topology question."""

    error_code = 6


class ScenarioFailure(MaintainError):
    """Raised when a scenario run finishes with one or more failed steps."""

    error_code = 7

    def __init__(self, result, message=None):
        self.result = result
        super().__init__(message=message or f"Scenario '{result.scenario}' failed")
