"""
Pytest configuration and fixtures for nuance engine tests.

This module provides:
- Network blocking fixture to prevent accidental API calls in CI
- Lane default profiles and fingerprint builders
"""

import socket
import pytest
from unittest.mock import patch

from nuance_engine.core import default_engine_profile
from nuance_engine.models import (
    AntagonistType,
    CausalGrammar,
    ConflictMode,
    EndingType,
    IncitingIncidentCategory,
    Lane,
    RulesetFingerprint,
    StakesType,
    StoryEngine,
    TwistCountBucket,
)


class NetworkBlockedError(Exception):
    """Raised when a test attempts to make a network connection."""
    pass


def _block_socket_connect(*args, **kwargs):
    """Block all socket connections to prevent accidental API calls."""
    raise NetworkBlockedError(
        "Network access is blocked in unit tests. "
        "If you need to test network functionality, use mocks. "
        "This prevents accidental OpenAI/Anthropic API calls that cost money."
    )


@pytest.fixture(autouse=True)
def block_network():
    """
    Automatically block all network connections in tests.

    The regeneration step talks to OpenAI, OpenRouter or Anthropic; tests
    substitute stub generators and fake LLM clients instead.
    """
    with patch.object(socket.socket, 'connect', _block_socket_connect):
        with patch.object(socket, 'create_connection', _block_socket_connect):
            yield


@pytest.fixture
def feature_profile():
    """Lane default profile for feature_film."""
    return default_engine_profile(Lane.FEATURE_FILM)


@pytest.fixture
def vertical_profile():
    """Lane default profile for vertical_drama."""
    return default_engine_profile(Lane.VERTICAL_DRAMA)


def make_fingerprint(**overrides) -> RulesetFingerprint:
    """Fingerprint with neutral defaults; keyword arguments replace fields."""
    values = dict(
        lane=Lane.FEATURE_FILM,
        story_engine=StoryEngine.PRESSURE_COOKER,
        causal_grammar=CausalGrammar.ACCUMULATION,
        conflict_mode=ConflictMode.MORAL_TRAP,
        stakes_type=StakesType.PERSONAL,
        twist_count_bucket=TwistCountBucket.NONE,
        antagonist_type=AntagonistType.PERSON,
        ending_type=EndingType.AMBIGUOUS,
        inciting_incident_category=IncitingIncidentCategory.DISCOVERY,
        setting_texture_tags=[],
    )
    values.update(overrides)
    return RulesetFingerprint(**values)


@pytest.fixture
def fingerprint_factory():
    """Factory for RulesetFingerprint instances."""
    return make_fingerprint


# Restrained two-hander that clears every gate check for the lane defaults
PASSING_TEXT = (
    "Ana and her brother sit with the unpaid invoice in silence. "
    "There is a long pause before he speaks. "
    "What he won't say is that he already signed. "
    "He says instead that the weather turned. "
    "Her tactic is patience; his tell is the pen he keeps clicking. "
    "Later she rereads the contract and sees the clause in a new light. "
    "The cost of staying is the price of his silence. "
    "His reasons are understandable. "
    "Beneath the surface, neither of them mentions the money."
)


@pytest.fixture
def passing_text():
    """Text with subtext, quiet beats and a meaning shift and no melodrama."""
    return PASSING_TEXT
