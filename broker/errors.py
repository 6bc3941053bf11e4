"""Broker error taxonomy."""


class BrokerError(Exception):
    """Base class for broker errors that map to a human-readable reply."""


class DispatchFailure(BrokerError):
    """A single destination could not be reached during fan-out."""

    def __init__(self, destination: str, reason: str = ""):
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to dispatch to {destination}: {reason}" if reason else f"Failed to dispatch to {destination}")


class NotFound(BrokerError):
    """Unknown inquiry sequence number."""

    def __init__(self, sequence_number: int):
        self.sequence_number = sequence_number
        super().__init__(f"Inquiry not found: #{sequence_number}")


class InvalidCommand(BrokerError):
    """Unrecognized requester command or topic."""


class NormalizationFailure(BrokerError):
    """The text normalizer failed; callers fall back to raw text."""


class AssemblyFailure(BrokerError):
    """Report assembly failed; the conversation stays retryable."""


class PersistenceFailure(BrokerError):
    """The durable store could not be read or written."""
