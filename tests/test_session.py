import json

import pytest

from junction_bridge.errors import SessionStateError
from junction_bridge.proposal import ProposalFields
from junction_bridge.session import Phase, SessionState, SessionStore, advance


def build_state():
    fields = ProposalFields(bridge_workers=["air1a", "air1b"], contract_address="0xabc", title="T", summary="S")
    return advance(SessionState(), fields, "QmCid")


def test_round_trip(tmp_path):
    store = SessionStore(tmp_path / "testing_state.json")
    state = build_state()
    store.save(state)

    loaded = SessionStore(tmp_path / "testing_state.json").load()

    assert loaded == state
    assert loaded.phase is Phase.SUBMIT
    assert loaded.proposal.bridge_workers == ["air1a", "air1b"]
    assert loaded.created is True


def test_missing_file_is_fresh_start(tmp_path):
    state = SessionStore(tmp_path / "testing_state.json").load()
    assert state == SessionState()
    assert state.phase is Phase.SETUP


@pytest.mark.parametrize("content", ["{not json", "[]", '{"phase": "launch"}', '"submit"', "{}"])
def test_corrupt_file_is_fresh_start(tmp_path, content):
    path = tmp_path / "testing_state.json"
    path.write_text(content)
    assert SessionStore(path).load().phase is Phase.SETUP


def test_advance_only_from_setup():
    state = build_state()
    with pytest.raises(SessionStateError):
        advance(state)


def test_clear_is_idempotent(tmp_path):
    store = SessionStore(tmp_path / "testing_state.json")
    store.save(build_state())
    store.clear()
    assert not store.exists()
    store.clear()


def test_saved_file_uses_phase_string(tmp_path):
    store = SessionStore(tmp_path / "testing_state.json")
    store.save(build_state())
    text = store.path.read_text()
    assert '"phase": "submit"' in text
    assert '"bridge_workers"' in text


@pytest.mark.parametrize(
    "overrides",
    [{"bridge_workers": "air1a"}, {"bridge_workers": ["air1a", 7]}, {"title": ["T"]}],
)
def test_wrongly_typed_fields_start_fresh(tmp_path, overrides):
    path = tmp_path / "testing_state.json"
    data = build_state().to_dict()
    data.update(overrides)
    path.write_text(json.dumps(data))
    assert SessionStore(path).load() == SessionState()
