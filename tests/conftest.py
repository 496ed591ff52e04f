from __future__ import annotations
import logging
from logging.handlers import RotatingFileHandler

import pytest

JIRA_ENV = ("JIRA_DOMAIN", "JIRA_EMAIL", "JIRA_TOKEN", "JIRA_TIMEOUT_S")


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so that values loaded from a .env file are undone too
    for name in JIRA_ENV:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    return monkeypatch


@pytest.fixture(autouse=True)
def restore_logging():
    # drop the console/file handlers installed by setup_logging_from_env
    root = logging.getLogger()
    level = root.level
    factory = logging.getLogRecordFactory()
    yield
    for h in list(root.handlers):
        if type(h) in (logging.StreamHandler, RotatingFileHandler):
            root.removeHandler(h)
            if isinstance(h, RotatingFileHandler):
                h.close()
    root.setLevel(level)
    logging.setLogRecordFactory(factory)
