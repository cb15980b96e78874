"""Shared fixtures: project root on sys.path and an in-memory transport."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
from requests import Response
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


class RecordingAdapter(BaseAdapter):
    """Transport double: records prepared requests, answers with a canned body."""

    def __init__(self, body: bytes = b"{}", status: int = 200, error: Exception | None = None) -> None:
        super().__init__()
        self.body = body
        self.status = status
        self.error = error
        self.requests = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):  # type: ignore[no-untyped-def]
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        response = Response()
        response.status_code = self.status
        response._content = self.body
        response.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
        response.encoding = "utf-8"
        response.url = request.url
        response.request = request
        return response

    def close(self) -> None:
        pass

    @property
    def last(self):
        return self.requests[-1]


@pytest.fixture
def adapter() -> RecordingAdapter:
    return RecordingAdapter()


@pytest.fixture
def client(adapter):
    from api_client import APIClient, build_session

    return APIClient(session=build_session(adapter=adapter), timeout=5)
