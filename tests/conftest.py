"""Shared fixtures for appcat-regress tests."""

import logging
import os

import pytest

from .helpers import make_incident, make_rule_set


@pytest.fixture
def security_document():
    """One rule-set, one rule, one incident at proj1/src/A.java:10."""
    return [make_rule_set("security", {"sql-injection": [make_incident()]})]


@pytest.fixture
def quiet_logger():
    logger = logging.getLogger("appcat_regress.tests")
    logger.setLevel(logging.DEBUG)
    return logger


@pytest.fixture
def isolated_config_env(tmp_path, monkeypatch):
    """Keep ~/.appcat-regress.toml, ./appcat-regress.toml and env vars out of tests."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for key in list(os.environ):
        if key.startswith("APPCAT_REGRESS_"):
            monkeypatch.delenv(key)
    return work
