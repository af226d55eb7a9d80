"""
Conversation package: the keyword/decomposition responder.

This package implements a deterministic ELIZA-style responder that:
- Normalizes input into clauses of canonical tokens
- Ranks keywords and matches decomposition patterns
- Reflects pronouns in captured text and fills reassembly templates
- Rotates through reassemblies and default replies
- Remembers deferred replies in a bounded queue

Components:
    - Normalizer: Substitutions, clause splitting and tokenization
    - match_decomposition / reflect / assemble: Pattern matching and reassembly
    - MemoryQueue: Bounded FIFO of deferred replies
    - ResponderEngine: One conversation's responder
    - SessionRegistry: One engine per open conversation
"""

from eliza.conversation.normalizer import Normalizer
from eliza.conversation.matcher import assemble, match_decomposition, reflect
from eliza.conversation.memory import MemoryQueue
from eliza.conversation.engine import ResponderEngine
from eliza.conversation.sessions import Session, SessionNotFound, SessionRegistry

__all__ = [
    # Normalization
    "Normalizer",
    # Matching
    "match_decomposition",
    "reflect",
    "assemble",
    # Memory
    "MemoryQueue",
    # Engine
    "ResponderEngine",
    # Sessions
    "Session",
    "SessionNotFound",
    "SessionRegistry",
]
