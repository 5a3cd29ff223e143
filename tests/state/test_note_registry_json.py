import json

import pytest

from refnotes.state.note_registry import NoteRegistry


@pytest.mark.registry
def test_to_json_should_stringify_codes() -> None:
    registry = NoteRegistry()
    registry.add("m1")
    registry.add("m2", "a", {"x": 1})

    data = registry.to_json()

    assert data == {
        "notes": {"1": ["m1"], "a": ["m2"]},
        "note_data": {"a": {"x": 1}},
    }
    # must survive a real json round trip
    assert json.loads(json.dumps(data)) == data


@pytest.mark.registry
def test_from_json_should_restore_codes_messages_and_data() -> None:
    registry = NoteRegistry()
    registry.add("m1", "b")
    registry.add("m2")
    registry.add("m3", "b", {"x": 1})

    restored = NoteRegistry.from_json(json.loads(json.dumps(registry.to_json())))

    assert restored.get_codes() == ["b", 2]
    assert restored.get_messages("b") == ["m1", "m3"]
    assert restored.get_messages(2) == ["m2"]
    assert restored.get_data("b") == {"x": 1}


@pytest.mark.registry
def test_from_json_restored_registry_should_continue_auto_codes() -> None:
    registry = NoteRegistry()
    registry.add("m1")

    restored = NoteRegistry.from_json(registry.to_json())

    assert restored.add("m2") == 2


@pytest.mark.registry
def test_round_trip_should_be_lossless_for_mixed_codes() -> None:
    registry = NoteRegistry()
    registry.add("m1", "1")
    registry.add("m2", 1)
    registry.add("m3", "007")
    registry.add("m4", "note", {"x": 1})
    registry.append_data({"y": 2}, "1")

    data = registry.to_json()
    restored = NoteRegistry.from_json(json.loads(json.dumps(data)))

    assert len(data["notes"]) == len(registry)
    assert restored.get_codes() == registry.get_codes() == [1, "007", "note"]
    assert restored.get_messages() == ["m1", "m2", "m3", "m4"]
    assert restored.get_data(1) == {"y": 2}
    assert restored.get_data("note") == {"x": 1}


@pytest.mark.registry
def test_from_json_should_keep_non_canonical_digit_codes_as_str() -> None:
    restored = NoteRegistry.from_json({"notes": {"007": ["m1"]}, "note_data": {}})

    assert restored.get_codes() == ["007"]


@pytest.mark.registry
def test_from_json_with_empty_dict_should_give_empty_registry() -> None:
    restored = NoteRegistry.from_json({})

    assert not restored.has_notes()
    assert restored.note_data == {}


@pytest.mark.registry
def test_to_json_should_not_mutate_registry() -> None:
    registry = NoteRegistry()
    registry.add("m1", "a", {"x": 1})

    data = registry.to_json()
    data["notes"]["a"].append("sneaky")
    data["note_data"]["a"]["y"] = 2

    assert registry.get_messages("a") == ["m1"]
    assert registry.get_data("a") == {"x": 1}
