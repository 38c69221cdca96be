"""Shared fixtures: an in-memory stand-in for the Parse Server."""

import copy
import json
import os

import pytest

from core.parse_client import ParseClient, ParseObject

FIXTURES_DIR = os.path.join(os.path.dirname(__file__), "fixtures")


def load_parse_site():
    with open(os.path.join(FIXTURES_DIR, "parse_site.json")) as f:
        return json.load(f)


def _matches(raw, where):
    for key, expected in (where or {}).items():
        actual = raw.get(key)
        if isinstance(expected, dict) and expected.get("__type") == "Pointer":
            if not isinstance(actual, dict):
                return False
            if (actual.get("className"), actual.get("objectId")) != (
                expected["className"], expected["objectId"]
            ):
                return False
        elif actual != expected:
            return False
    return True


class FakeParseClient:
    """Answers find() from a dict of class name -> raw REST objects.

    Equality constraints are applied the way Parse does for plain values and
    pointers. Every call is recorded in `calls`.
    """

    server_url = "https://parse.test/parse"
    pointer = staticmethod(ParseClient.pointer)

    def __init__(self, classes):
        self.classes = classes
        self.calls = []

    def find(self, class_name, where=None):
        self.calls.append((class_name, where))
        rows = self.classes.get(class_name, [])
        return [ParseObject(class_name, raw) for raw in rows if _matches(raw, where)]


@pytest.fixture
def parse_site():
    return copy.deepcopy(load_parse_site())


@pytest.fixture
def fake_client(parse_site):
    return FakeParseClient(parse_site)
