"""
Shared fixtures for responder tests.

Provides a small, hand-checked rule table alongside the bundled doctor
script so engine behaviour can be asserted exactly.
"""

import copy

import pytest

from eliza.container import ElizaContainer
from eliza.conversation.engine import ResponderEngine
from eliza.rules.loader import load_default_rules, parse_rules


MINI_RULES = {
    "greetings": ["Hi there.", "Hello again."],
    "quit": ["bye", "quit"],
    "defaults": ["Please go on.", "Tell me more.", "I see."],
    "reflections": {
        "i": "you",
        "am": "are",
        "my": "your",
        "me": "you",
        "you": "I",
        "your": "my",
    },
    "substitutions": {"don't": "do not", "i'm": "i am"},
    "synonyms": {
        "be": ["am", "is", "are"],
        "family": ["mother", "father"],
        "sad": ["unhappy", "depressed"],
    },
    "keywords": [
        {
            "word": "mother",
            "rank": 3,
            "decompositions": [
                {"pattern": "* mother *", "reassemblies": ["Tell me more about your family."]}
            ],
        },
        {
            "word": "i",
            "rank": 0,
            "decompositions": [
                {
                    "pattern": "* i am *",
                    "reassemblies": [
                        "Why do you say you are {2}?",
                        "How long have you been {2}?",
                    ],
                },
                {"pattern": "*", "reassemblies": ["You say {1}?"]},
            ],
        },
        {
            "word": "my",
            "rank": 2,
            "decompositions": [
                {
                    "pattern": "* my *",
                    "reassemblies": [{"defer": "Earlier you said your {2}."}, "Your {2}?"],
                }
            ],
        },
        {
            "word": "computer",
            "rank": 5,
            "decompositions": [
                {
                    "pattern": "*",
                    "reassemblies": ["Do computers worry you?", "Why do you mention computers?"],
                }
            ],
        },
        {
            "word": "like",
            "rank": 10,
            "decompositions": [
                {"pattern": "* @be * like *", "reassemblies": ["In what way?"]}
            ],
        },
        {
            "word": "sorry",
            "rank": 0,
            "decompositions": [
                {"pattern": "*", "reassemblies": ["Please don't apologise."]}
            ],
        },
        {
            "word": "apologise",
            "rank": 0,
            "decompositions": [{"pattern": "*", "reassemblies": [{"goto": "sorry"}]}],
        },
        {
            "word": "secret",
            "rank": 0,
            "decompositions": [
                {"pattern": "* secret *", "reassemblies": [{"defer": "You mentioned a secret {2}."}]}
            ],
        },
    ],
}


@pytest.fixture
def mini_table():
    """A fresh, mutable copy of the small rule table."""
    return copy.deepcopy(MINI_RULES)


@pytest.fixture(scope="session")
def mini_rules():
    """The small rule table, compiled."""
    return parse_rules(MINI_RULES, source="mini")


@pytest.fixture(scope="session")
def doctor_rules():
    """The bundled doctor script."""
    return load_default_rules()


@pytest.fixture
def engine(mini_rules):
    """Fresh engine over the small rule table."""
    return ResponderEngine(mini_rules)


@pytest.fixture
def doctor(doctor_rules):
    """Fresh engine over the doctor script."""
    return ResponderEngine(doctor_rules)


@pytest.fixture
def container(mini_rules):
    """Container sharing the small rule table."""
    return ElizaContainer(rules=mini_rules)
