"""Shared fixtures: in-memory GitHub, release archives and host fakes."""

from __future__ import annotations

import io
import json
import os
import subprocess
import tarfile
import zipfile
from http.client import IncompleteRead
from pathlib import Path
from typing import Dict, List, Optional, Union
from unittest.mock import patch
from urllib.error import HTTPError

import pytest

from gitas_installer.bootstrap.placement import PrivilegeProbe

API_LATEST = "https://api.github.com/repos/letmutex/gitas/releases/latest"
DOWNLOAD_PREFIX = "https://github.com/letmutex/gitas/releases/download"

Route = Union[bytes, Exception, "TruncatedBody"]


def build_tarball(members: Dict[str, bytes]) -> bytes:
    """Return the bytes of a .tar.gz holding the given files."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


def build_zip(members: Dict[str, bytes]) -> bytes:
    """Return the bytes of a .zip holding the given files."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        for name, data in members.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def http_error(url: str, code: int = 404, reason: str = "Not Found") -> HTTPError:
    return HTTPError(url, code, reason, hdrs=None, fp=None)  # type: ignore[arg-type]


class TruncatedBody(io.BytesIO):
    """A response whose connection drops after the first bytes."""

    def read(self, *args) -> bytes:
        raise IncompleteRead(self.getvalue(), 40)


class FakeGitHub:
    """Serves canned responses in place of urllib's urlopen."""

    def __init__(self) -> None:
        self.routes: Dict[str, Route] = {}
        self.requests: List[str] = []
        self.timeouts: List[Optional[float]] = []

    def latest(self, tag: Optional[str]) -> None:
        self.routes[API_LATEST] = json.dumps({"tag_name": tag}).encode()

    def asset(self, tag: str, suffix: str, data: Route) -> str:
        url = f"{DOWNLOAD_PREFIX}/{tag}/gitas-{tag}-{suffix}"
        self.routes[url] = data
        return url

    def __call__(self, request, timeout=None, context=None):
        url = request.full_url
        self.requests.append(url)
        self.timeouts.append(timeout)
        route = self.routes.get(url)
        if route is None:
            raise http_error(url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, TruncatedBody):
            return route
        return io.BytesIO(route)


@pytest.fixture
def fake_github():
    """Patch urlopen with an in-memory GitHub."""
    github = FakeGitHub()
    with patch("gitas_installer.bootstrap.download.urlopen", side_effect=github):
        yield github


@pytest.fixture
def gitas_tarball() -> bytes:
    return build_tarball({"gitas": b"#!/bin/sh\necho gitas\n", "README.md": b"gitas\n"})


@pytest.fixture
def gitas_zip() -> bytes:
    return build_zip({"gitas.exe": b"MZ fake exe"})


class FakeProbe(PrivilegeProbe):
    """Answers the privilege checks with fixed values."""

    def __init__(self, privileged: bool = False, writable: bool = True) -> None:
        self.privileged = privileged
        self.writable = writable

    def is_privileged(self) -> bool:
        return self.privileged

    def can_write(self, directory: Path) -> bool:
        return self.writable


class SudoRecorder:
    """Records elevated commands and performs them without sudo."""

    def __init__(self, fail_on: str = "", missing: bool = False) -> None:
        self.commands: List[List[str]] = []
        self.fail_on = fail_on
        self.missing = missing

    def __call__(self, cmd: List[str]) -> subprocess.CompletedProcess:
        self.commands.append(cmd)
        if self.missing:
            raise FileNotFoundError(cmd[0])
        if cmd[1] == self.fail_on:
            raise subprocess.CalledProcessError(1, cmd)
        if cmd[1] == "mkdir":
            Path(cmd[3]).mkdir(parents=True, exist_ok=True)
        elif cmd[1] == "mv":
            os.replace(cmd[2], cmd[3])
        elif cmd[1] == "chmod":
            Path(cmd[3]).chmod(0o755)
        return subprocess.CompletedProcess(cmd, 0)
