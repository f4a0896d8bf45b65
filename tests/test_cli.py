"""Tests for the command-line source selector."""

import pytest
import yaml

from bgsub import cli
from bgsub.core import ExitReason, SequencerResult
from bgsub.utils.config import SequenceConfig
from conftest import FakeSubtractor, RecordingDisplay, ScriptedCapture


@pytest.fixture
def no_display(monkeypatch):
    """Fail the test if a display or model is created."""
    def _boom(*args, **kwargs):
        pytest.fail("display/model must not be created")

    monkeypatch.setattr(cli, "create_display", _boom)
    monkeypatch.setattr(cli, "BackgroundModel", _boom)


@pytest.fixture
def fakes(monkeypatch):
    """Swap in a recording display and a counting model; returns both."""
    state = {"display": RecordingDisplay(), "model": FakeSubtractor()}
    monkeypatch.setattr(cli, "create_display", lambda config: state["display"])
    monkeypatch.setattr(cli, "BackgroundModel", lambda config: state["model"])
    return state


@pytest.fixture
def config_file(tmp_path):
    def _write(**sections):
        data = {"display": {"enabled": False, "frame_interval_ms": 0}}
        for key, value in sections.items():
            data.setdefault(key, {}).update(value)
        path = tmp_path / "bgsub.yaml"
        path.write_text(yaml.dump(data))
        return str(path)

    return _write


class TestUsage:
    @pytest.mark.parametrize("argv", [
        [],
        ["-vid"],
        ["-img"],
        ["movie.avi"],
        ["-vid", "a.avi", "-img", "1.png"],
        ["-foo", "a.avi"],
        ["-vid", "a.avi", "extra"],
    ])
    def test_bad_arguments_exit_1(self, argv, no_display, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(argv)
        assert exc.value.code == 1
        assert "usage: bgsub" in capsys.readouterr().err

    def test_help_exits_0(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["-h"])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "-vid VIDEO" in out
        assert "-img IMAGE" in out

    def test_image_name_without_number(self, tmp_path, no_display, capsys):
        assert cli.main(["-img", str(tmp_path / "background.png")]) == 1
        assert "no frame number" in capsys.readouterr().err

    def test_missing_video(self, tmp_path, no_display, capsys):
        assert cli.main(["-vid", str(tmp_path / "missing.avi")]) == 1
        assert "Unable to open video file" in capsys.readouterr().err

    def test_missing_first_image(self, tmp_path, no_display, capsys):
        assert cli.main(["-img", str(tmp_path / "1.png")]) == 1
        assert "Unable to open first image frame" in capsys.readouterr().err

    @pytest.mark.parametrize("text", ["- a\n- b\n", "subtractor: [unclosed\n"])
    def test_malformed_config_exits_1(self, tmp_path, no_display, capsys, text):
        path = tmp_path / "bad.yaml"
        path.write_text(text)
        argv = ["-vid", "x.avi", "--config", str(path), "--algorithm", "KNN"]
        assert cli.main(argv) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_null_section_with_override(self, tmp_path, no_display, capsys):
        path = tmp_path / "bgsub.yaml"
        path.write_text("subtractor:\ndisplay:\n  enabled: false\n")
        argv = ["-vid", str(tmp_path / "x.avi"), "--config", str(path),
                "--algorithm", "KNN"]
        # config loads; the run then stops on the missing video
        assert cli.main(argv) == 1
        err = capsys.readouterr().err
        assert "Invalid configuration" not in err
        assert "Unable to open video file" in err

    def test_config_is_a_directory(self, tmp_path, no_display, capsys):
        assert cli.main(["-vid", "x.avi", "--config", str(tmp_path)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_version_exits_0(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["--version"])
        assert exc.value.code == 0
        assert "bgsub 0.1.0" in capsys.readouterr().out

    def test_invalid_config(self, tmp_path, no_display, capsys):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"subtractor": {"algorithm": "GMG"}}))
        assert cli.main(["-vid", "x.avi", "--config", str(path)]) == 1
        assert "Invalid configuration" in capsys.readouterr().err


class TestImageSequence:
    def test_five_images_then_failure(self, image_sequence, fakes, config_file, capsys):
        paths = image_sequence("img", range(1, 6))
        code = cli.main(["-img", str(paths[0]), "--config", config_file()])

        assert code == 1
        assert len(fakes["model"].calls) == 5
        assert [int(img[0, 0, 0]) for img in fakes["model"].calls] == [10, 20, 30, 40, 50]
        assert fakes["display"].closed
        assert "img6.png" in capsys.readouterr().err

    def test_end_of_input_can_be_success(self, image_sequence, fakes, config_file):
        paths = image_sequence("img", range(1, 4))
        path = config_file(sequence={"end_of_input_is_error": False})
        assert cli.main(["-img", str(paths[0]), "--config", path]) == 0
        assert len(fakes["model"].calls) == 3

    def test_quit_key_exits_0(self, image_sequence, fakes, config_file):
        fakes["display"] = RecordingDisplay(keys=[-1, ord("q")])
        paths = image_sequence(numbers=range(1, 6))
        assert cli.main(["-img", str(paths[0]), "--config", config_file()]) == 0
        assert len(fakes["model"].calls) == 2

    def test_headless_with_real_model(self, image_sequence, config_file):
        paths = image_sequence(numbers=range(1, 4), width=3)
        path = config_file(sequence={"preserve_padding": True,
                                     "end_of_input_is_error": False})
        assert cli.main(["-img", str(paths[0]), "--config", path,
                         "--algorithm", "knn", "--log-level", "warning"]) == 0


class TestVideo:
    def test_three_frames_then_failure(self, scripted_capture, fakes, config_file):
        path = scripted_capture(available=3)
        code = cli.main(["-vid", str(path), "--config", config_file()])

        assert code == 1
        assert len(fakes["model"].calls) == 3
        assert len(fakes["display"].shown) == 3

    def test_capture_released_on_quit(self, scripted_capture, fakes, config_file):
        fakes["display"] = RecordingDisplay(keys=[27])
        path = scripted_capture(available=10)
        assert cli.main(["-vid", str(path), "--config", config_file()]) == 0
        assert ScriptedCapture.instances[-1].releases == 1
        assert len(fakes["model"].calls) == 1

    def test_capture_released_on_failure(self, scripted_capture, fakes, config_file):
        path = scripted_capture(available=2, frame_count=9)
        assert cli.main(["-vid", str(path), "--config", config_file()]) == 1
        assert ScriptedCapture.instances[-1].releases == 1


class TestExitCode:
    @pytest.mark.parametrize("reason, strict, expected", [
        (ExitReason.USER_QUIT, True, 0),
        (ExitReason.USER_QUIT, False, 0),
        (ExitReason.END_OF_SEQUENCE, True, 1),
        (ExitReason.END_OF_SEQUENCE, False, 0),
        (ExitReason.IO_FAILURE, True, 1),
        (ExitReason.IO_FAILURE, False, 1),
    ])
    def test_mapping(self, reason, strict, expected):
        result = SequencerResult(reason, 3)
        policy = SequenceConfig(end_of_input_is_error=strict)
        assert cli.exit_code(result, policy) == expected
