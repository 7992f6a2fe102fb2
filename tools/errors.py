"""Error taxonomy shared by the stores, providers and orchestrator."""


class MirrorError(Exception):
    """Base class for engine errors surfaced to callers."""


class ConnectivityError(MirrorError):
    """A data-access collaborator was unreachable or failed.

    The orchestrator recovers from this where a fallback exists (cached
    wardrobe snapshot, default preferences, empty profile) and re-raises it
    otherwise.
    """

    def __init__(self, message: str, *, operation: str | None = None) -> None:
        super().__init__(message)
        self.operation = operation


__all__ = ["ConnectivityError", "MirrorError"]
