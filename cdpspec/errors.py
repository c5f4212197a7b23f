"""Failure taxonomy shared by the catalog reader, the AI adapter and the
session orchestrator.

None of these are fatal.  Adapters raise them, the orchestrator catches
them at its boundary and turns them into transient notices.
"""


class CDPSpecError(Exception):
    """Base class for every recoverable lookup failure."""


class CatalogConnectionError(CDPSpecError, ConnectionError):
    """The remote catalog store is unconfigured, unreachable, or a page failed."""


class IdentificationMiss(CDPSpecError):
    """The AI provider did not return a usable model label for an image."""


class SpecificationMiss(CDPSpecError):
    """The AI provider did not return a usable dac/laser payload."""


class DeviceAccessError(CDPSpecError):
    """Camera or microphone could not be opened or read."""
