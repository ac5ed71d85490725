# SPDX-License-Identifier: Apache-2.0.
# Copyright (c) 2024 - 2026 Waldiez and contributors.

"""Tests for the logging configuration."""
# pylint: disable=missing-return-doc,missing-param-doc,missing-raises-doc

import os
import sys
from typing import Any
from unittest.mock import patch

import pytest

# noinspection PyProtectedMember
from stack_backup._logging import (
    ENV_PREFIX,
    get_log_level,
    get_logging_config,
)


@pytest.fixture(name="mock_logging_config")
def mock_logging_config_fixture() -> dict[str, Any]:
    """Fixture to mock the uvicorn logging configuration."""
    return {
        "formatters": {
            "default": {"fmt": "%(message)s"},
            "access": {"fmt": "%(message)s"},
        },
        "handlers": {
            "default": {"formatter": "default"},
            "access": {"formatter": "access"},
        },
        "loggers": {
            "uvicorn": {"level": "DEBUG", "handlers": []},
        },
    }


def test_get_logging_config(mock_logging_config: dict[str, Any]) -> None:
    """Test the get_logging_config function."""
    with patch("uvicorn.config.LOGGING_CONFIG", mock_logging_config):
        log_level = "WARNING"
        config = get_logging_config(log_level)
        assert (
            config["formatters"]["default"]["fmt"]
            == "%(levelprefix)s [%(asctime)s] %(message)s"
        )
        assert config["formatters"]["default"]["datefmt"] == "%Y-%m-%d %H:%M:%S"
        assert "access" not in config["formatters"]
        assert "access" not in config["handlers"]
        assert "uvicorn" not in config["loggers"]
        for name in ("", "stack_backup"):
            logger = config["loggers"][name]
            assert logger["level"] == log_level
            assert logger["handlers"] == ["default"]
            assert logger["propagate"] is False
    # the original is not touched
    assert "access" in mock_logging_config["handlers"]


def test_get_log_level() -> None:
    """Test get_log_level."""
    os.environ[f"{ENV_PREFIX}LOG_LEVEL"] = "DEBUG"
    assert get_log_level() == "DEBUG"

    os.environ.pop(f"{ENV_PREFIX}LOG_LEVEL", "INVALID")
    assert get_log_level() == "INFO"

    sys.argv = ["test_lib.py", "--debug"]
    assert get_log_level() == "DEBUG"

    sys.argv = ["test_lib.py", "--log-level", "warning"]
    assert get_log_level() == "WARNING"

    os.environ.pop(f"{ENV_PREFIX}LOG_LEVEL", None)
    sys.argv = ["test_lib.py", "--log-level"]
    assert get_log_level() == "INFO"

    os.environ.pop(f"{ENV_PREFIX}LOG_LEVEL", None)
    sys.argv = ["test_lib.py", "--log-level", "INVALID"]
    assert get_log_level() == "INFO"

    sys.argv = ["test_lib.py"]
    os.environ[f"{ENV_PREFIX}LOG_LEVEL"] = "INVALID"
    assert get_log_level() == "INFO"

    sys.argv = ["test_lib.py"]
    os.environ.pop(f"{ENV_PREFIX}LOG_LEVEL", None)
    assert get_log_level() == "INFO"
