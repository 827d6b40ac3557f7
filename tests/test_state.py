"""Tests for recorded state persistence."""

import json

import pytest

from s3content.exceptions import ContentConfigError
from s3content.sync.state import ContentState, ContentStateManager


def _state(path="/srv/site", bucket="site-bucket"):
    return ContentState(
        id=path,
        path=path,
        bucket=bucket,
        files={f"{path}/a.html": "a.html", f"{path}/img/b.png": "img/b.png"},
        region="eu-west-1",
    )


class TestContentState:
    """Tests for ContentState serialization."""

    def test_to_dict(self):
        data = _state().to_dict()

        assert data["id"] == "/srv/site"
        assert data["bucket"] == "site-bucket"
        assert data["files"] == {
            "/srv/site/a.html": "a.html",
            "/srv/site/img/b.png": "img/b.png",
        }
        assert data["region"] == "eu-west-1"
        assert data["profile"] is None

    def test_from_dict_round_trip(self):
        state = _state()
        assert ContentState.from_dict(state.to_dict()) == state

    def test_from_dict_defaults(self):
        state = ContentState.from_dict({"id": "/srv/site", "bucket": "b"})

        assert state.path == "/srv/site"
        assert state.files == {}
        assert state.last_sync is None


class TestContentStateManager:
    """Tests for ContentStateManager."""

    def test_load_missing_state(self, state_manager):
        assert state_manager.load_state("/srv/site") is None

    def test_save_and_load(self, state_manager):
        state_file = state_manager.save_state(_state())

        loaded = state_manager.load_state("/srv/site")

        assert state_file.exists()
        assert loaded is not None
        assert loaded.files == _state().files
        assert loaded.last_sync is not None

    def test_state_is_keyed_by_path_not_bucket(self, state_manager):
        state_manager.save_state(_state(bucket="first"))
        state_manager.save_state(_state(bucket="second"))

        assert state_manager.load_state("/srv/site").bucket == "second"
        assert len(list(state_manager.state_dir.glob("*.json"))) == 1

    def test_different_paths_do_not_collide(self, state_manager):
        state_manager.save_state(_state(path="/srv/one"))
        state_manager.save_state(_state(path="/srv/two"))

        assert state_manager.load_state("/srv/one").id == "/srv/one"
        assert state_manager.load_state("/srv/two").id == "/srv/two"

    def test_relative_and_absolute_path_share_state(
        self, state_manager, tmp_path, monkeypatch
    ):
        monkeypatch.chdir(tmp_path)
        state_manager.save_state(_state(path="site"))

        assert state_manager.load_state(str(tmp_path / "site")) is not None

    def test_clear_state(self, state_manager):
        state_manager.save_state(_state())

        assert state_manager.clear_state("/srv/site") is True
        assert state_manager.load_state("/srv/site") is None
        assert state_manager.clear_state("/srv/site") is False

    def test_corrupt_state_raises(self, state_manager):
        state_file = state_manager.save_state(_state())
        state_file.write_text("{not json")

        with pytest.raises(ContentConfigError, match="Failed to load recorded state"):
            state_manager.load_state("/srv/site")

    def test_state_that_is_not_an_object_raises(self, state_manager):
        state_file = state_manager.save_state(_state())
        state_file.write_text("[]")

        with pytest.raises(ContentConfigError, match="must be a JSON object"):
            state_manager.load_state("/srv/site")

    def test_state_that_is_not_utf8_raises(self, state_manager):
        state_file = state_manager.save_state(_state())
        state_file.write_bytes(b"\xff\xfe\x00garbage")

        with pytest.raises(ContentConfigError, match="Failed to load recorded state"):
            state_manager.load_state("/srv/site")

    def test_state_missing_fields_raises(self, state_manager):
        state_file = state_manager.save_state(_state())
        state_file.write_text(json.dumps({"files": {}}))

        with pytest.raises(ContentConfigError):
            state_manager.load_state("/srv/site")

    def test_no_temp_file_left_behind(self, state_manager):
        state_manager.save_state(_state())

        assert list(state_manager.state_dir.glob("*.tmp")) == []
