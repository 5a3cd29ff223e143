from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from loguru import logger
from pydantic import validate_call

from refnotes.pydantic_models.common.constrained_types import (
    NoteCode,
    NoteData,
    is_omitted_code,
    normalize_note_code,
)


class NoteRegistry:
    """
    Collects footnote messages and optional per-note data, keyed by a note code.

    A content producer calls `add` / `add_data` / `append_data` while rendering,
    and a note renderer later reads everything back with the getters.
    All getters are total: an empty registry or an unknown code gives `[]`, `""` or `None`, never an error.
    """

    # Dev Note:
    # Auto-assigned codes are `len(notes) + 1`, not a monotonic counter.
    # After a `remove`, the next auto code can therefore be one that is still in use,
    # and the new message is appended to that note. Callers that mix removal and auto codes should pass explicit codes.

    def __init__(self) -> None:
        self._notes: dict[NoteCode, list[str]] = {}
        self._note_data: dict[NoteCode, NoteData] = {}
        logger.debug("[NoteRegistry] Initialized a new NoteRegistry")

    # PUBLIC READ-ONLY VIEWS
    @property
    def notes(self) -> Mapping[NoteCode, list[str]]:
        # live, immutable view over the private dict
        return MappingProxyType(self._notes)

    @property
    def note_data(self) -> Mapping[NoteCode, NoteData]:
        return MappingProxyType(self._note_data)

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, code: object) -> bool:
        try:
            return normalize_note_code(code) in self._notes
        except ValueError:
            return False

    # QUERIES
    def has_notes(self) -> bool:
        return len(self._notes) > 0

    def get_codes(self) -> list[NoteCode]:
        """All note codes, in the order they were first used."""
        return list(self._notes.keys())

    def get_first_code(self) -> NoteCode:
        """First note code, or the empty string if there are no notes."""
        if not self._notes:
            return ""
        return next(iter(self._notes))

    def get_last_code(self) -> NoteCode:
        """Last note code, or the empty string if there are no notes."""
        if not self._notes:
            return ""
        return next(reversed(self._notes))

    def get_code(self) -> NoteCode:
        """Alias of `get_first_code`."""
        return self.get_first_code()

    @validate_call
    def get_messages(self, code: NoteCode | None = None) -> list[str]:
        """
        Messages of a single note, or of all notes if no code is given.

        Without a code, the messages of every note are concatenated in note order (no deduplication).
        An unknown code gives an empty list.
        """
        if is_omitted_code(code):
            return [message for messages in self._notes.values() for message in messages]
        return list(self._notes.get(code, []))

    @validate_call
    def get_message(self, code: NoteCode | None = None) -> str:
        """First message of the given note, or of the first note if no code is given."""
        if is_omitted_code(code):
            code = self.get_code()
        messages = self.get_messages(code)
        if not messages:
            return ""
        return messages[0]

    @validate_call
    def get_data(self, code: NoteCode | None = None) -> NoteData | None:
        if is_omitted_code(code):
            code = self.get_code()
        return self._note_data.get(code)

    # WRITE PATH
    @validate_call
    def add(
        self,
        message: str,
        code: NoteCode | None = None,
        data: NoteData | None = None,
    ) -> NoteCode:
        """
        Adds a note, or appends another message to an existing note.

        If no code is given, the next code is `number of notes + 1`.
        Non-empty `data` replaces whatever data the note had; empty or missing `data` leaves it untouched.
        Returns the code that was used, which is what callers relying on auto-assigned codes need.
        """
        if is_omitted_code(code):
            code = len(self._notes) + 1

        self._notes.setdefault(code, []).append(message)

        if data:
            self._note_data[code] = data

        logger.debug(
            f"[NoteRegistry] Added message to note {code!r} - note now has {len(self._notes[code])} message(s), {len(self._notes)} note(s) in total"
        )
        return code

    @validate_call
    def add_data(self, data: NoteData, code: NoteCode | None = None) -> None:
        """Sets (replaces) the data of a note. Use `append_data` to extend it instead."""
        code = self._resolve_data_code(code)
        self._note_data[code] = data
        logger.debug(f"[NoteRegistry] Replaced data of note {code!r} with keys {list(data.keys())}")

    @validate_call
    def append_data(self, data: NoteData, code: NoteCode | None = None) -> None:
        """Merges `data` into the data of a note. Keys in `data` win over existing keys (shallow merge)."""
        code = self._resolve_data_code(code)
        if code in self._note_data:
            self._note_data[code] = {**self._note_data[code], **data}
        else:
            self._note_data[code] = data
        logger.debug(
            f"[NoteRegistry] Merged keys {list(data.keys())} into data of note {code!r}"
        )

    @validate_call
    def remove(self, code: NoteCode) -> None:
        """Removes all messages and the data of a note. Unknown codes are ignored."""
        removed_notes = self._notes.pop(code, None)
        removed_data = self._note_data.pop(code, None)
        if removed_notes is not None or removed_data is not None:
            logger.debug(f"[NoteRegistry] Removed note {code!r}")

    def clear(self) -> None:
        logger.debug(f"[NoteRegistry] Clearing {len(self._notes)} note(s)")
        self._notes.clear()
        self._note_data.clear()

    def _resolve_data_code(self, code: NoteCode | None) -> NoteCode:
        if code is None or is_omitted_code(code):
            code = self.get_code()
            if code == "":
                logger.warning(
                    "[NoteRegistry] Received note data without a code while no notes exist - storing it under the empty code"
                )
        return code

    # SNAPSHOTS
    def to_json(self) -> dict[str, dict[str, Any]]:
        """
        Snapshot of the registry as a json-compatible dict.
        Integer codes become strings, as json object keys have to be.
        Stored string codes are never canonical ints, so no two codes share a key.
        """
        return {
            "notes": {str(code): list(messages) for code, messages in self._notes.items()},
            "note_data": {str(code): dict(data) for code, data in self._note_data.items()},
        }

    @classmethod
    def from_json(cls, data: dict[str, dict[str, Any]]) -> "NoteRegistry":
        """
        Constructs a NoteRegistry from a snapshot made by `to_json`.
        Keys spelling a canonical int are turned back into ints, which is exactly what they were before `to_json`.
        """
        registry = cls()
        for raw_code, messages in data.get("notes", {}).items():
            registry._notes[normalize_note_code(raw_code)] = list(messages)
        for raw_code, note_data in data.get("note_data", {}).items():
            registry._note_data[normalize_note_code(raw_code)] = dict(note_data)
        logger.debug(f"[NoteRegistry] Restored {len(registry)} note(s) from json")
        return registry

