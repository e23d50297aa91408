"""Unit tests for ScribeltConfig."""

import pytest
from pathlib import Path

from scribelt.config import ScribeltConfig


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "scribelt.yaml"
    path.write_text(
        "audio:\n"
        "  sample_rate: 44100\n"
        "google_cloud:\n"
        "  credentials_path: creds/google.json\n"
        "  language: fr-FR\n"
        "export:\n"
        "  directory: exports\n"
        "logging:\n"
        "  file_path: logs/scribelt.log\n",
        encoding="utf-8",
    )
    return path


@pytest.mark.unit
class TestScribeltConfig:

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        config = ScribeltConfig()

        assert config.config_file is None
        assert config.get('audio.sample_rate') == 16000
        assert config.get('audio.chunk_size') == 1024
        assert config.get('display.default_font_size') == 17
        assert config.get('display.min_font_size') == 12
        assert config.get('export.file_name') == "SpeechTranscription.txt"
        assert config.get_google_credentials_path() is None
        assert config.get_export_directory() is None

    def test_picks_up_file_in_working_directory(self, config_file, monkeypatch):
        monkeypatch.chdir(config_file.parent)

        config = ScribeltConfig()

        assert config.config_file == config_file
        assert config.get('audio.sample_rate') == 44100

    def test_file_values_merge_with_defaults(self, config_file):
        config = ScribeltConfig(str(config_file))

        assert config.get('audio.sample_rate') == 44100
        assert config.get('audio.channels') == 1
        assert config.get('google_cloud.language') == "fr-FR"
        assert config.get('google_cloud.enable_automatic_punctuation') is True

    def test_relative_paths_resolve_against_config_file(self, config_file):
        config = ScribeltConfig(str(config_file))
        base = config_file.parent

        assert config.get_google_credentials_path() == str(base / "creds" / "google.json")
        assert config.get_export_directory() == str(base / "exports")
        assert config.get('logging.file_path') == str(base / "logs" / "scribelt.log")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ScribeltConfig(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("audio: [unclosed", encoding="utf-8")

        with pytest.raises(ValueError):
            ScribeltConfig(str(path))

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")

        with pytest.raises(ValueError):
            ScribeltConfig(str(path))

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")

        config = ScribeltConfig(str(path))

        assert config.get('audio.sample_rate') == 16000

    def test_get_default_for_missing_and_null_keys(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ScribeltConfig()

        assert config.get('no.such.key', 'fallback') == 'fallback'
        assert config.get('permissions.override', 'none') == 'none'

    def test_set_creates_nested_keys(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        config = ScribeltConfig()

        config.set('display.min_font_size', 10)
        config.set('new.section.value', True)

        assert config.get('display.min_font_size') == 10
        assert config.get('new.section.value') is True

    def test_defaults_are_not_shared(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        first = ScribeltConfig()
        first.set('audio.sample_rate', 8000)

        assert ScribeltConfig().get('audio.sample_rate') == 16000
