"""
Responder and session constants.

Defaults used when neither the environment nor the caller overrides them.
"""

# Rule Database
DEFAULT_RULES_FILE = "doctor.json"
"""Bundled rule set shipped in eliza/data. Used when no rules path is configured."""

# Memory Queue
DEFAULT_MEMORY_CAPACITY = 10
"""Maximum deferred replies held per conversation. Oldest entries are
dropped when a new entry would exceed this bound."""

MAX_MEMORY_CAPACITY = 1000
"""Upper bound accepted from configuration."""

# Sessions
DEFAULT_SESSION_TTL = 28800
"""Idle seconds before a conversation is expired (8 hours)."""

MAX_MESSAGE_LENGTH = 5000
"""Longest message accepted by the web service."""

# Matching
CLAUSE_SEPARATORS = ".,;!?"
"""Characters that split input into independent clauses."""

CLAUSE_WORDS = ("but",)
"""Words that split input into independent clauses."""

# Conversation
DEFAULT_GREETING = "Hello! I'm here to chat with you. How can I help you today?"
"""Opening line when the rule set defines no greetings."""

DEFAULT_FAREWELL = "Goodbye. It was nice talking to you."
"""Closing line when the rule set defines no farewells."""
