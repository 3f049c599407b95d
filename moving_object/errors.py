# moving_object/errors.py

from enum import Enum


class ErrorKind(Enum):
    """Error categories counted by FusionStats."""

    CONTRACT_VIOLATION = 'contract_violation'
    MALFORMED_OBSERVATION = 'malformed_observation'
    LATE_ARRIVAL = 'late_arrival'
    SINK_FAILURE = 'sink_failure'
    CONFIG_ERROR = 'config_error'


class FusionError(Exception):
    """Base class for moving object fusion errors."""

    kind: ErrorKind = None


class ContractViolation(FusionError):
    """A caller broke a frame precondition. Not recoverable."""

    kind = ErrorKind.CONTRACT_VIOLATION


class AlreadyMerging(ContractViolation):
    """merge() was re-entered while a merge was in progress."""


class MalformedObservation(FusionError):
    """A single record failed sanity checks and is dropped."""

    kind = ErrorKind.MALFORMED_OBSERVATION


class LateArrival(FusionError):
    """A batch arrived for a frame that was already published or evicted."""

    kind = ErrorKind.LATE_ARRIVAL


class SinkFailure(FusionError):
    """An output sink failed to emit."""

    kind = ErrorKind.SINK_FAILURE


class ConfigError(FusionError):
    """Configuration is missing or malformed."""

    kind = ErrorKind.CONFIG_ERROR
