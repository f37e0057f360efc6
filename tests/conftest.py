"""Shared fixtures: an in-memory lessons backend behind httpx.MockTransport."""

import json

import httpx
import pytest

from lessonshop.services.api_client import LessonsApi
from lessonshop.services.storefront import Storefront


def lesson_records():
    return [
        {"id": 1, "_id": "a1", "subject": "Math", "location": "London", "price": 100, "spaces": 5},
        {"id": 2, "_id": "b2", "subject": "english", "location": "York", "price": 80, "spaces": 1},
        {"id": 3, "_id": "c3", "subject": "Art", "location": "Oxford", "price": 110, "spaces": 0},
        {"id": 4, "_id": "d4", "subject": "art", "location": "Bath", "price": 90, "spaces": 2},
    ]


class FakeBackend:
    """Records every request and answers like the lessons backend."""

    def __init__(self, lessons=None):
        self.lessons = lessons if lessons is not None else lesson_records()
        self.requests = []
        self.fail_lessons = False
        self.fail_orders = False
        self.fail_put_ids = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append((request.method, request.url.path, body))

        if request.method == "GET" and request.url.path == "/lessons":
            if self.fail_lessons:
                return httpx.Response(500, json={"error": "boom"})
            return httpx.Response(200, json=self.lessons)

        if request.method == "POST" and request.url.path == "/orders":
            if self.fail_orders:
                return httpx.Response(503, json={"error": "down"})
            return httpx.Response(201, json={"insertedId": "order-1"})

        if request.method == "PUT" and request.url.path.startswith("/lessons/"):
            remote_id = request.url.path.rsplit("/", 1)[-1]
            if remote_id in self.fail_put_ids:
                return httpx.Response(500, json={"error": "nope"})
            return httpx.Response(200, json={"matchedCount": 1})

        return httpx.Response(404)

    def calls(self, method):
        return [(path, body) for m, path, body in self.requests if m == method]


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def api(backend):
    return LessonsApi(base_url="http://backend.test", transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def store(api):
    return Storefront(api=api, catalog_source="remote")
