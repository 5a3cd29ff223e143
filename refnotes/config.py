from loguru import logger

from refnotes.state.note_registry import NoteRegistry


class RegistrySingleton:
    """
    Holds one shared NoteRegistry for callers that want a process-wide footnote accumulator.
    Prefer passing an explicit NoteRegistry around; use this only where producer and renderer cannot share one.
    """

    _instance: NoteRegistry | None = None

    class classproperty:
        def __init__(self, fget):
            self.fget = fget

        def __get__(self, obj, owner):
            return self.fget(owner)

    @classproperty
    def registry(cls) -> NoteRegistry:
        """Returns the shared registry, creating an empty one on first access."""
        if cls._instance is None:
            cls._instance = NoteRegistry()
            logger.debug("[RegistrySingleton] Created shared NoteRegistry")
        return cls._instance

    @classmethod
    def reset(cls):
        cls._instance = None

    @classmethod
    def is_initialized(cls):
        return cls._instance is not None

