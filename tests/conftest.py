"""Pytest bootstrap configuration.

Client settings read ORISUN_* variables; clear them so a developer's
environment cannot leak into the tests.
"""
import os

import pytest


@pytest.fixture(autouse=True)
def _clean_orisun_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("ORISUN_"):
            monkeypatch.delenv(key, raising=False)
