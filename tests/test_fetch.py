import io
import zipfile

import pytest
import requests

from lab_installer.lib import fetch
from lab_installer.lib.fetch import DownloadError, download, extract_zip

URL = "https://example.test/nursery.data"


class FakeStream:
    """Streaming response that can die partway through the body."""

    def __init__(self, chunks, *, status_code=200, drop_after=None):
        self.chunks = chunks
        self.status_code = status_code
        self.drop_after = drop_after

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def iter_content(self, chunk_size=None):
        for i, chunk in enumerate(self.chunks):
            if self.drop_after is not None and i >= self.drop_after:
                raise requests.ConnectionError("connection reset by peer")
            yield chunk


@pytest.fixture
def serve(monkeypatch):
    def _serve(response):
        seen = []

        def get(url, **kwargs):
            seen.append((url, kwargs))
            return response

        monkeypatch.setattr(fetch.requests, "get", get)
        return seen

    return _serve


def test_download_writes_body(tmp_path, serve):
    seen = serve(FakeStream([b"vhigh,low\n", b"", b"high,med\n"]))
    dest = tmp_path / "datasets" / "nursery.data"

    assert download(URL, dest) == dest
    assert dest.read_bytes() == b"vhigh,low\nhigh,med\n"
    assert seen[0][1]["stream"] is True
    assert list(dest.parent.iterdir()) == [dest]


def test_connection_drop_leaves_nothing_behind(tmp_path, serve):
    serve(FakeStream([b"vhigh,low\n", b"high,med\n"], drop_after=1))
    dest = tmp_path / "nursery.data"

    with pytest.raises(DownloadError, match="connection reset"):
        download(URL, dest)
    assert not dest.exists()
    assert list(tmp_path.iterdir()) == []


def test_failed_refresh_keeps_previous_file(tmp_path, serve):
    serve(FakeStream([b"new"], drop_after=0))
    dest = tmp_path / "START_HERE.ipynb"
    dest.write_text("{}", encoding="utf-8")

    with pytest.raises(DownloadError):
        download(URL, dest)
    assert dest.read_text(encoding="utf-8") == "{}"
    assert [p.name for p in tmp_path.iterdir()] == ["START_HERE.ipynb"]


def test_http_error_is_a_download_error(tmp_path, serve):
    serve(FakeStream([b"not found"], status_code=404))
    dest = tmp_path / "nursery.data"

    with pytest.raises(DownloadError, match="404"):
        download(URL, dest)
    assert list(tmp_path.iterdir()) == []


def test_dry_run_does_not_fetch(tmp_path, serve):
    seen = serve(FakeStream([b"x"]))
    download(URL, tmp_path / "x" / "nursery.data", dry_run=True)

    assert seen == []
    assert not (tmp_path / "x").exists()


def test_extract_zip(tmp_path):
    archive = tmp_path / "sms_spam.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("SMSSpamCollection", "ham\thi\n")
    out = tmp_path / "out"

    assert extract_zip(archive, out) == ["SMSSpamCollection"]
    assert (out / "SMSSpamCollection").read_text(encoding="utf-8") == "ham\thi\n"


def test_extract_zip_rejects_non_archive(tmp_path):
    archive = tmp_path / "sms_spam.zip"
    archive.write_bytes(b"<html>rate limited</html>")

    with pytest.raises(DownloadError, match="Not a valid zip archive"):
        extract_zip(archive, tmp_path / "out")
    assert not (tmp_path / "out").exists()


def test_truncated_archive_is_rejected(tmp_path):
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        zf.writestr("SMSSpamCollection", "ham\thi\n" * 100)
    archive = tmp_path / "sms_spam.zip"
    archive.write_bytes(buf.getvalue()[:40])

    with pytest.raises(DownloadError):
        extract_zip(archive, tmp_path / "out")
