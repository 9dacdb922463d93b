"""
URL 工具测试
"""
import pytest

from script_handler.lib.download.url_utils import extract_filename_from_url, is_storage_blob_url, redact_url


class TestExtractFilename:

    @pytest.mark.parametrize("url,expected", [
        ("https://example.com/scripts/run.sh", "run.sh"),
        ("https://acct.blob.core.windows.net/c/install.sh?sv=2020&sig=abc", "install.sh"),
        ("https://example.com/a/my%20script.py", "my script.py"),
        ("https://example.com/a/Makefile", "Makefile"),
    ])
    def test_last_path_segment(self, url: str, expected: str):
        assert extract_filename_from_url(url) == expected

    @pytest.mark.parametrize("url", [
        "https://example.com",
        "https://example.com/",
        "https://example.com/dir/",
        "https://example.com/..",
    ])
    def test_no_filename(self, url: str):
        assert extract_filename_from_url(url) == ""


class TestRedactUrl:

    def test_strips_query(self):
        url = "https://acct.blob.core.windows.net/c/run.sh?sv=2020&sig=secret"
        assert redact_url(url) == "https://acct.blob.core.windows.net/c/run.sh"

    def test_plain_url_unchanged(self):
        assert redact_url("https://example.com/run.sh") == "https://example.com/run.sh"


class TestIsStorageBlobUrl:

    @pytest.mark.parametrize("url", [
        "https://acct.blob.core.windows.net/c/run.sh",
        "https://ACCT.Blob.Core.Windows.Net/c/run.sh?sv=1",
    ])
    def test_blob_hosts(self, url: str):
        assert is_storage_blob_url(url) is True

    @pytest.mark.parametrize("url", [
        "https://raw.githubusercontent.com/o/r/main/run.sh",
        "https://blob.core.windows.net.evil.com/run.sh",
        "https://example.com/acct.blob.core.windows.net/run.sh",
        "not a url",
    ])
    def test_other_hosts(self, url: str):
        assert is_storage_blob_url(url) is False
