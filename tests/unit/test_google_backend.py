"""Unit tests for the Google streaming recognition backend."""

import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from google.api_core import exceptions as gax_exceptions
from google.auth import exceptions as auth_exceptions

from scribelt.exceptions import RecognitionChannelError, RecognizerUnavailable
from scribelt.models.events import AudioEvent
from scribelt.transcription import google_backend
from scribelt.transcription.google_backend import GoogleRecognitionChannel, GoogleSpeechService


def make_response(*results):
    """Build a streaming response from (transcript, is_final) pairs."""
    return SimpleNamespace(results=[
        SimpleNamespace(alternatives=[SimpleNamespace(transcript=text)], is_final=is_final)
        for text, is_final in results
    ])


def make_event(data: bytes = b'\x01\x02' * 8) -> AudioEvent:
    return AudioEvent(chunk_id="chunk_1", audio_data=data, timestamp=0.0, sequence_number=1)


@pytest.fixture
def mock_speech_client():
    with patch.object(google_backend.speech, "SpeechClient") as client_class:
        yield client_class


def open_and_drain(service: GoogleSpeechService):
    updates = []
    channel = service.open_channel(updates.append, partial_results=True)
    channel._thread.join(timeout=2.0)
    return channel, updates


@pytest.mark.unit
class TestGoogleSpeechService:

    def test_missing_credentials_file(self, tmp_path):
        service = GoogleSpeechService(credentials_path=str(tmp_path / "missing.json"))

        with pytest.raises(RecognizerUnavailable):
            service.open_channel(lambda update: None)

    def test_invalid_credentials_file(self, tmp_path):
        creds = tmp_path / "bad.json"
        creds.write_text("{}", encoding="utf-8")
        service = GoogleSpeechService(credentials_path=str(creds))

        with patch.object(google_backend.service_account.Credentials, "from_service_account_file",
                          side_effect=ValueError("missing fields")):
            with pytest.raises(RecognizerUnavailable):
                service.initialize()

    def test_no_default_credentials(self, mock_speech_client):
        mock_speech_client.side_effect = auth_exceptions.DefaultCredentialsError("none found")
        service = GoogleSpeechService()

        with pytest.raises(RecognizerUnavailable):
            service.open_channel(lambda update: None)

    def test_service_account_credentials(self, tmp_path, mock_speech_client):
        creds = tmp_path / "creds.json"
        creds.write_text("{}", encoding="utf-8")
        credentials = SimpleNamespace(project_id="test-project")
        service = GoogleSpeechService(credentials_path=str(creds))

        with patch.object(google_backend.service_account.Credentials, "from_service_account_file",
                          return_value=credentials):
            service.initialize()

        mock_speech_client.assert_called_once_with(credentials=credentials)

    def test_streaming_config(self, mock_speech_client):
        client = mock_speech_client.return_value
        client.streaming_recognize.return_value = iter([])
        service = GoogleSpeechService(sample_rate=16000, language="de-DE")

        open_and_drain(service)

        kwargs = client.streaming_recognize.call_args.kwargs
        assert kwargs["config"].interim_results is True
        assert kwargs["config"].config.sample_rate_hertz == 16000
        assert kwargs["config"].config.language_code == "de-DE"

    def test_partial_and_final_transcripts(self, mock_speech_client):
        client = mock_speech_client.return_value
        client.streaming_recognize.return_value = iter([
            make_response(("hello", False)),
            make_response(("hello world", True)),
            make_response(("how", False)),
            make_response(("how are you", True)),
        ])
        service = GoogleSpeechService()

        _, updates = open_and_drain(service)

        assert [update.text for update in updates] == [
            "hello",
            "hello world",
            "hello world how",
            "hello world how are you",
        ]
        assert [update.is_final for update in updates] == [False, True, False, True]

    def test_empty_responses_are_skipped(self, mock_speech_client):
        client = mock_speech_client.return_value
        client.streaming_recognize.return_value = iter([make_response(), make_response(("hi", False))])
        service = GoogleSpeechService()

        _, updates = open_and_drain(service)

        assert [update.text for update in updates] == ["hi"]

    def test_api_error_is_delivered(self, mock_speech_client):
        client = mock_speech_client.return_value
        client.streaming_recognize.side_effect = gax_exceptions.ServiceUnavailable("down")
        service = GoogleSpeechService()

        _, updates = open_and_drain(service)

        assert len(updates) == 1
        assert updates[0].is_error
        assert isinstance(updates[0].error, RecognitionChannelError)

    def test_unexpected_error_is_delivered(self, mock_speech_client):
        client = mock_speech_client.return_value
        client.streaming_recognize.side_effect = RuntimeError("stream broke")
        service = GoogleSpeechService()

        _, updates = open_and_drain(service)

        assert len(updates) == 1
        assert isinstance(updates[0].error, RecognitionChannelError)
        assert "stream broke" in str(updates[0].error)


@pytest.mark.unit
class TestGoogleRecognitionChannel:

    def test_requests_stream_pushed_audio_until_end(self):
        channel = GoogleRecognitionChannel(MagicMock(), MagicMock(), lambda update: None)

        channel.push_audio(make_event(b'\x01\x00'))
        channel.push_audio(make_event(b'\x02\x00'))
        channel.end_audio()
        channel.push_audio(make_event(b'\x03\x00'))

        requests = list(channel._requests())
        assert [request.audio_content for request in requests] == [b'\x01\x00', b'\x02\x00']

    def test_finish_ends_audio(self):
        channel = GoogleRecognitionChannel(MagicMock(), MagicMock(), lambda update: None)

        channel.finish()
        channel.finish()

        assert channel.is_finished
        assert list(channel._requests()) == []
