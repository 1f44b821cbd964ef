"""Shared pytest setup: devnet runs are opt-in."""

import os

import pytest


def pytest_configure(config):
    config.addinivalue_line("markers", "devnet: read-only tests against a live devnet RPC")


def pytest_collection_modifyitems(config, items):
    """Skip devnet-marked tests unless DEVNET_TESTS is set or -k selects devnet."""
    if "DEVNET_TESTS" in os.environ or "devnet" in (config.getoption("-k") or ""):
        return

    skip_devnet = pytest.mark.skip(reason="set DEVNET_TESTS=1 or pass -k devnet to run")
    for item in items:
        if "devnet" in item.keywords:
            item.add_marker(skip_devnet)
