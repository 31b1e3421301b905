from __future__ import annotations

import io
import os
from pathlib import Path

import httpx
import pytest

from envload.loader import load_dotenv, load_file, load_stream, load_url
from envload.parser import MalformedLineError
from envload.sources import AcquisitionError


def test_load_stream() -> None:
    res = load_stream(io.BytesIO(b"ONE=1\nTWO='2'\nTHREE = \"3\"\nFOUR=${ONE}"))

    assert res.ok
    assert res.mapping == {"ONE": "1", "TWO": "2", "THREE": "3", "FOUR": "1"}


def test_load_file_missing_returns_acquisition_error(tmp_path: Path) -> None:
    res = load_file(tmp_path / "missing.env")

    assert res.mapping == {}
    assert isinstance(res.error, AcquisitionError)


def test_load_file_malformed_returns_partial_mapping(tmp_path: Path) -> None:
    p = tmp_path / "bad.env"
    p.write_text("A=1\nBADLINE\nC=3\n", encoding="utf-8")

    res = load_file(p)

    assert res.mapping == {"A": "1"}
    assert isinstance(res.error, MalformedLineError)


def test_load_url() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="ONE=1\nTWO='2'\nTHREE = \"3\"\nFOUR=${TWO}")

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        res = load_url("http://example.test/.env", client=client)

    assert res.ok
    assert res.mapping == {"ONE": "1", "TWO": "2", "THREE": "3", "FOUR": "2"}


def test_load_url_failure_is_returned() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500)

    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        res = load_url("http://example.test/.env", client=client)

    assert res.mapping == {}
    assert isinstance(res.error, AcquisitionError)


def test_load_dotenv_skips_missing_and_respects_existing(tmp_path: Path) -> None:
    local = tmp_path / ".env.local"
    base = tmp_path / ".env"
    local.write_text("A=local\n", encoding="utf-8")
    base.write_text("A=base\nB=base\nC=base\n", encoding="utf-8")
    env = {"C": "preset"}

    loaded = load_dotenv(
        [tmp_path / "absent.env", local, base],
        environ=env,
    )

    assert loaded == [local, base]
    assert env == {"C": "preset", "A": "local", "B": "base"}


def test_load_dotenv_override(tmp_path: Path) -> None:
    base = tmp_path / ".env"
    base.write_text("C=file\n", encoding="utf-8")
    env = {"C": "preset"}

    load_dotenv([base], override=True, environ=env)

    assert env == {"C": "file"}


def test_load_dotenv_malformed_file_is_not_merged(tmp_path: Path) -> None:
    base = tmp_path / ".env"
    base.write_text("A=1\nBROKEN\n", encoding="utf-8")
    env: dict[str, str] = {}

    with pytest.raises(MalformedLineError):
        load_dotenv([base], environ=env)

    assert env == {}


def test_load_dotenv_uses_os_environ(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("ENVLOAD_TEST_KEY", "placeholder")
    monkeypatch.delenv("ENVLOAD_TEST_KEY")
    (tmp_path / ".env").write_text("ENVLOAD_TEST_KEY=from-file\n", encoding="utf-8")

    loaded = load_dotenv()

    assert loaded == [Path(".env")]
    assert os.environ["ENVLOAD_TEST_KEY"] == "from-file"
