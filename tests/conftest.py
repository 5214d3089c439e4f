"""Shared fixtures: an in-memory stand-in for requests.Session."""

from __future__ import annotations

import hashlib
import io
import zipfile

import pytest
import requests


class FakeResponse:
    def __init__(self, status_code: int = 200, body: bytes = b"") -> None:
        self.status_code = status_code
        self.content = body
        self.closed = False

    @property
    def text(self) -> str:
        return self.content.decode("utf-8")

    def iter_content(self, chunk_size: int = 1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i : i + chunk_size]

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> FakeResponse:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


class FakeSession:
    """Serves registered URLs; unknown URLs raise ConnectionError. Records every GET."""

    def __init__(self) -> None:
        self.routes: dict[str, FakeResponse | Exception] = {}
        self.calls: list[str] = []
        self.responses: list[FakeResponse] = []

    def add(self, url: str, body: bytes | str = b"", status: int = 200) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self.routes[url] = FakeResponse(status, body)

    def fail(self, url: str, exc: Exception | None = None) -> None:
        self.routes[url] = exc or requests.ConnectionError(f"cannot reach {url}")

    def get(self, url: str, timeout: float | None = None, stream: bool = False) -> FakeResponse:
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(route, Exception):
            raise route
        resp = FakeResponse(route.status_code, route.content)
        self.responses.append(resp)
        return resp

    def count(self, url: str) -> int:
        return self.calls.count(url)

    def close(self) -> None:
        pass


def md5_hex(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def make_zip(members: dict[str, bytes], modes: dict[str, int] | None = None) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        for name, data in members.items():
            info = zipfile.ZipInfo(name)
            if modes and name in modes:
                info.external_attr = (0o100000 | modes[name]) << 16
            zf.writestr(info, data)
    return buf.getvalue()


class LogLines(list):
    """Callable log sink for components that take log=Callable[[str], None]."""

    def __call__(self, msg: str) -> None:
        self.append(msg)

    def matching(self, text: str) -> list[str]:
        return [line for line in self if text in line]


@pytest.fixture
def session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def log() -> LogLines:
    return LogLines()
