"""
Eliza: a deterministic, rule-driven conversational responder.

This package implements the classic keyword/decomposition/reassembly
approach to conversation: ranked keywords select decomposition patterns,
captured text is pronoun-reflected into reply templates, and replies rotate
so repeated inputs do not repeat answers.

The system includes:
- Rule database loading with fail-fast validation (RuleSet, load_rules)
- The responder engine (ResponderEngine) with bounded reply memory
- Per-conversation engines over a shared rule set (ElizaContainer, SessionRegistry)
- An interactive chat REPL (ChatInterface)
"""

__version__ = "0.1.0"

# Core components
from eliza.chat import ChatInterface
from eliza.container import ElizaContainer
from eliza.conversation.engine import ResponderEngine
from eliza.conversation.memory import MemoryQueue
from eliza.conversation.sessions import SessionNotFound, SessionRegistry
from eliza.rules.loader import RuleConfigError, load_default_rules, load_rules, parse_rules
from eliza.rules.types import RuleSet

__all__ = [
    # Core
    "ElizaContainer",
    "ResponderEngine",
    "MemoryQueue",
    "SessionRegistry",
    "SessionNotFound",
    "ChatInterface",
    # Rules
    "RuleSet",
    "RuleConfigError",
    "load_rules",
    "load_default_rules",
    "parse_rules",
]
