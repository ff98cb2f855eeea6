from __future__ import annotations

import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.append(ROOT)

from estimator.app import app as flask_app  # noqa: E402
from estimator.catalog import DEFAULT_CATALOG  # noqa: E402


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


@pytest.fixture(name="client")
def client_fixture():
    flask_app.config["TESTING"] = True
    with flask_app.test_client() as c:
        yield c
