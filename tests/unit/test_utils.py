import pytest

from simple_storage.blob.errors import ConfigurationError
from simple_storage.blob.types import ByteRange, ProgressEvent
from simple_storage.blob.utils import (
    debug,
    get_container_name_from_env,
    get_content_type_from_extension,
    get_descriptor_from_env,
    make_progress_event,
    validate_range,
)


class TestContentTypes:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("a.txt", "text/plain"),
            ("dir/page.HTML", "text/html"),
            ("archive.tar.gz", "application/gzip"),
            ("photo.JPEG", "image/jpeg"),
            ("data.json", "application/json"),
            ("sheet.xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
        ],
    )
    def test_known_extensions(self, name, expected):
        assert get_content_type_from_extension(name) == expected

    @pytest.mark.parametrize("name", ["README", "file.unknownext", "dir.d/file", "", "trailing."])
    def test_unknown(self, name):
        assert get_content_type_from_extension(name) is None


class TestProgressEvents:
    def test_rounds_half_up(self):
        assert make_progress_event(1, 8).percent_complete == 13  # 12.5
        assert make_progress_event(1, 3).percent_complete == 33

    def test_zero_total_is_complete(self):
        assert make_progress_event(0, 0) == ProgressEvent(0, 0, 100)

    def test_unknown_total(self):
        assert make_progress_event(7, None) == ProgressEvent(7, None, None)

    def test_clamped(self):
        assert make_progress_event(10, 5).percent_complete == 100


class TestValidateRange:
    def test_none_is_whole_blob(self):
        assert validate_range(None) is None

    def test_inclusive_bounds(self):
        assert validate_range(ByteRange(0, 0)) == (0, 1)
        assert validate_range((10, 19)) == (10, 10)

    @pytest.mark.parametrize(
        "byte_range",
        [ByteRange(3, 2), (0.5, 2), (-1, 2), (0, -1), (False, 1), "0-9", 5],
    )
    def test_invalid(self, byte_range):
        with pytest.raises(ConfigurationError, match="Invalid range"):
            validate_range(byte_range)


class TestEnvironment:
    def test_container_name_argument_wins(self, mock_env_clear, monkeypatch):
        monkeypatch.setenv("AZURE_STORAGE_CONTAINER_NAME", "env-container")

        assert get_container_name_from_env("explicit") == "explicit"
        assert get_container_name_from_env() == "env-container"

    def test_missing_container_name(self, mock_env_clear):
        with pytest.raises(ConfigurationError, match="AZURE_STORAGE_CONTAINER_NAME"):
            get_container_name_from_env()

    def test_descriptor_precedence(self, mock_env_clear, monkeypatch):
        monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_NAME", "myaccount")
        assert get_descriptor_from_env() == "myaccount"

        monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_URL", "https://myaccount.blob.core.windows.net")
        assert get_descriptor_from_env() == "https://myaccount.blob.core.windows.net"

        monkeypatch.setenv("AZURE_STORAGE_CONNECTION_STRING", "UseDevelopmentStorage=true")
        assert get_descriptor_from_env() == "UseDevelopmentStorage=true"


class TestDebug:
    def test_prints_when_enabled(self, mock_env_clear, monkeypatch, capsys):
        monkeypatch.setenv("DEBUG", "blob")

        debug("hello")

        assert capsys.readouterr().out == "simple-storage: hello\n"

    def test_silent_by_default(self, mock_env_clear, capsys):
        debug("hello")

        assert capsys.readouterr().out == ""
