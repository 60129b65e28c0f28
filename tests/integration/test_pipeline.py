"""Integration tests for the batch driver.

These tests run whole batches over temporary model directories with a fake
thumbnail renderer and a mocked HTTP session:
- Per-model state trajectories (uploaded, failed, skipped)
- Skip-before-render and skip-before-upload guarantees
- One pause per upload attempt
- The end-to-end scenarios an operator would see
"""

import logging
from pathlib import Path
from unittest.mock import patch, MagicMock

import pytest
import requests

from fuel_publisher.pipeline import (
    ModelState,
    discover_model_dirs,
    run_batch,
)
from fuel_publisher.uploader import UploadConfig


@pytest.fixture
def upload_config() -> UploadConfig:
    return UploadConfig(base_url="https://fuel.example.org", token="jwt", delay_seconds=0)


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("fuel_publisher.uploader.uploader.time.sleep") as mock_sleep:
        yield mock_sleep


def uploaded_names(session: MagicMock):
    """Model names sent in each POST, in order."""
    return [dict(c.kwargs["data"])["name"] for c in session.post.call_args_list]


class TestDiscoverModelDirs:
    """Test candidate directory discovery."""

    def test_only_visible_directories(self, tmp_path: Path):
        (tmp_path / "b_model").mkdir()
        (tmp_path / "a_model").mkdir()
        (tmp_path / ".hidden").mkdir()
        (tmp_path / "README.md").write_text("not a model")

        assert discover_model_dirs(tmp_path) == [tmp_path / "a_model", tmp_path / "b_model"]

    def test_symlink_to_file_is_not_a_candidate(self, tmp_path: Path):
        target = tmp_path / "file.txt"
        target.write_text("x")
        (tmp_path / "link").symlink_to(target)

        assert discover_model_dirs(tmp_path) == []


class TestRunBatch:
    """Test per-model skip/continue semantics."""

    def test_missing_name_never_reaches_uploader(self, make_model, fake_renderer, mock_session, upload_config):
        model_dir = make_model(name=None)

        summary = run_batch(model_dir.parent, "me", upload_config, fake_renderer, mock_session)

        assert summary.outcomes[0].state is ModelState.SKIPPED
        assert fake_renderer.calls == []
        mock_session.post.assert_not_called()

    def test_missing_descriptor_file_skips_before_render(self, make_model, fake_renderer, mock_session, upload_config):
        model_dir = make_model(create_sdf=False)

        summary = run_batch(model_dir.parent, "me", upload_config, fake_renderer, mock_session)

        outcome = summary.outcomes[0]
        assert outcome.state is ModelState.SKIPPED
        assert "model.sdf file does not exist" in outcome.reason
        assert fake_renderer.calls == []
        mock_session.post.assert_not_called()

    def test_no_sdf_entries_is_skipped(self, make_model, fake_renderer, mock_session, upload_config):
        model_dir = make_model(sdf=[])

        summary = run_batch(model_dir.parent, "me", upload_config, fake_renderer, mock_session)

        assert summary.outcomes[0].state is ModelState.SKIPPED
        assert fake_renderer.calls == []
        mock_session.post.assert_not_called()

    def test_thumbnail_failure_does_not_block_upload(self, make_model, failing_renderer, mock_session, upload_config):
        model_dir = make_model()

        summary = run_batch(model_dir.parent, "me", upload_config, failing_renderer, mock_session)

        outcome = summary.outcomes[0]
        assert outcome.state is ModelState.UPLOADED
        assert outcome.thumbnails_created is False
        assert mock_session.post.call_count == 1

    def test_bad_model_does_not_stop_batch(self, make_model, fake_renderer, mock_session, upload_config):
        make_model(dirname="a_broken", name="")
        make_model(dirname="b_box", name="Box")
        root = make_model(dirname="c_ball", name="Ball").parent

        summary = run_batch(root, "me", upload_config, fake_renderer, mock_session)

        assert [o.state for o in summary.outcomes] == [
            ModelState.SKIPPED,
            ModelState.UPLOADED,
            ModelState.UPLOADED,
        ]
        assert uploaded_names(mock_session) == ["Box", "Ball"]
        assert (summary.uploaded, summary.failed, summary.skipped) == (2, 0, 1)

    def test_upload_failure_does_not_stop_batch(self, make_model, fake_renderer, upload_config, http_response):
        make_model(dirname="a", name="First")
        root = make_model(dirname="b", name="Second").parent
        session = MagicMock(spec=requests.Session)
        session.post.side_effect = [
            http_response(500, b'{"msg":"boom"}'),
            http_response(200, b"{}"),
        ]

        summary = run_batch(root, "me", upload_config, fake_renderer, session)

        assert [o.state for o in summary.outcomes] == [ModelState.FAILED, ModelState.UPLOADED]
        assert summary.outcomes[0].reason == "boom"

    def test_unexpected_error_marks_model_failed(self, make_model, fake_renderer, mock_session, upload_config):
        make_model(dirname="a", name="First")
        root = make_model(dirname="b", name="Second").parent

        with patch(
            "fuel_publisher.pipeline.driver.build_payload",
            side_effect=[RuntimeError("disk on fire"), MagicMock(fields=[("name", "Second")], files=[])],
        ):
            with patch("fuel_publisher.pipeline.driver.upload_model") as mock_upload:
                mock_upload.return_value = MagicMock(success=True)
                summary = run_batch(root, "me", upload_config, fake_renderer, mock_session)

        assert summary.outcomes[0].state is ModelState.FAILED
        assert "disk on fire" in summary.outcomes[0].reason
        assert summary.outcomes[1].state is ModelState.UPLOADED

    def test_one_pause_per_upload_attempt(self, make_model, fake_renderer, upload_config, http_response, no_sleep):
        make_model(dirname="a", name="First")
        make_model(dirname="b", name=None)
        root = make_model(dirname="c", name="Third").parent
        session = MagicMock(spec=requests.Session)
        session.post.side_effect = [http_response(200), http_response(422, b'{"msg":"x"}')]

        run_batch(root, "me", upload_config, fake_renderer, session)

        assert no_sleep.call_count == 2

    def test_scene_template_shared_across_models(self, make_model, fake_renderer, mock_session, upload_config):
        make_model(dirname="a", name="First")
        root = make_model(dirname="b", name="Second").parent

        run_batch(root, "me", upload_config, fake_renderer, mock_session)

        scenes = {scene for scene, _, _ in fake_renderer.calls}
        assert len(scenes) == 1
        assert not scenes.pop().exists()


class TestEndToEndScenarios:
    """Operator-visible behavior of complete runs."""

    def test_valid_model_is_rendered_and_uploaded(self, make_model, fake_renderer, mock_session, upload_config, caplog):
        """Scenario A: one valid model named Box with SDF 1.5."""
        model_dir = make_model(name="Box", sdf=[("1.5", "model.sdf")])
        caplog.set_level(logging.INFO)

        summary = run_batch(model_dir.parent, "OpenRobotics", upload_config, fake_renderer, mock_session)

        assert summary.outcomes[0].state is ModelState.UPLOADED
        assert (model_dir / "thumbnails" / "1.png").exists()

        messages = [r.getMessage() for r in caplog.records]
        assert messages.index("Created thumbnails") < messages.index("Uploaded")

        _, kwargs = mock_session.post.call_args
        names = [part[0] for _, part in kwargs["files"]]
        assert "Box/thumbnails/1.png" in names
        assert "Box/model.sdf" in names
        assert dict(kwargs["data"])["owner"] == "OpenRobotics"

    def test_missing_name_is_skipped_without_side_effects(self, make_model, fake_renderer, mock_session, upload_config, caplog):
        """Scenario B: no <name>, no subprocess call and no HTTP request."""
        model_dir = make_model(name=None)
        caplog.set_level(logging.INFO)

        summary = run_batch(model_dir.parent, "me", upload_config, fake_renderer, mock_session)

        assert summary.outcomes[0].state is ModelState.SKIPPED
        assert "Skipping" in caplog.text
        assert fake_renderer.calls == []
        mock_session.post.assert_not_called()

    def test_highest_sdf_version_is_rendered(self, make_model, fake_renderer, mock_session, upload_config):
        """Scenario C: versions 1.0 and 1.6, 1.6 is rendered."""
        model_dir = make_model(sdf=[("1.6", "model.sdf"), ("1.0", "model-1_0.sdf")])

        run_batch(model_dir.parent, "me", upload_config, fake_renderer, mock_session)

        assert fake_renderer.calls[0][1] == model_dir / "model.sdf"
        mock_session.post.assert_called_once()

    def test_server_error_message_is_reported(self, make_model, fake_renderer, upload_config, http_response, caplog):
        """Scenario D: 422 with {"msg": "duplicate model"}."""
        model_dir = make_model()
        session = MagicMock(spec=requests.Session)
        session.post.return_value = http_response(422, b'{"msg":"duplicate model"}')
        caplog.set_level(logging.INFO)

        summary = run_batch(model_dir.parent, "me", upload_config, fake_renderer, session)

        outcome = summary.outcomes[0]
        assert outcome.state is ModelState.FAILED
        assert outcome.upload_result.message == "duplicate model"
        assert outcome.reason == "duplicate model"
        assert f"Failed to upload {model_dir}: duplicate model" in caplog.text
