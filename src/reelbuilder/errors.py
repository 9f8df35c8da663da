"""Error taxonomy for the timeline assembly engine.

Every error also inherits the builtin exception callers would catch for the
same situation, so `except ValueError` keeps working around ingestion and
`except KeyError` around lookups.

  - Input errors: InvalidDuration, UnsupportedMediaType,
    MetadataExtractionFailed. Raised before anything enters the registry.
  - Lookup errors: ClipNotFound, SlotNotFound.
  - Precondition errors: NotReady, AlreadyInFlight. Raised synchronously by
    the generation coordinator, before the merge collaborator is called.
  - Collaborator errors: MergeFailed. Captured by the coordinator as a
    failed generation state rather than propagated.
"""


class ReelBuilderError(Exception):
    """Base class for all reelbuilder errors."""


class InvalidDuration(ReelBuilderError, ValueError):
    pass


class UnsupportedMediaType(ReelBuilderError, ValueError):
    pass


class MetadataExtractionFailed(ReelBuilderError, RuntimeError):
    pass


class ClipNotFound(ReelBuilderError, KeyError):
    def __str__(self):
        # KeyError repr()s its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class SlotNotFound(ClipNotFound):
    pass


class NotReady(ReelBuilderError, RuntimeError):
    pass


class AlreadyInFlight(ReelBuilderError, RuntimeError):
    pass


class MergeFailed(ReelBuilderError, RuntimeError):
    pass
