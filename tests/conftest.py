"""
Pytest configuration and shared fixtures for theme-amender tests.

No test talks to the network: the fallback generator is always a fake.
"""

import copy
import threading

import pytest

from theme_amender.defaults import default_theme
from theme_amender.store import InMemoryThemeStore


class FakeGenerator:
    """Scripted fallback generator that records every call it receives."""

    def __init__(self, regen_result=None, patch_result=None, error=None, delay=None):
        self.regen_result = regen_result
        self.patch_result = patch_result
        self.error = error
        self.delay = delay
        self.calls = []
        self.release = threading.Event()

    def _maybe_block(self):
        if self.delay is not None:
            self.release.wait(self.delay)
        if self.error is not None:
            raise self.error

    def regenerate(self, instruction, subtree):
        self.calls.append(("regenerate", instruction, copy.deepcopy(subtree)))
        self._maybe_block()
        return copy.deepcopy(self.regen_result)

    def propose_patch(self, instruction, allowed_paths, context):
        self.calls.append(("propose_patch", instruction, list(allowed_paths), copy.deepcopy(context)))
        self._maybe_block()
        return copy.deepcopy(self.patch_result)


@pytest.fixture
def baseline():
    """Complete, schema-valid token document."""
    return default_theme()


@pytest.fixture
def store(baseline):
    """In-memory store holding the baseline under id 'acme'."""
    return InMemoryThemeStore({"acme": baseline})


@pytest.fixture
def fake_generator():
    return FakeGenerator()
