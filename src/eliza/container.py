"""
Dependency Injection Container for Eliza.

Loads the rule database once and hands out per-conversation engines that
share it. Rotation cursors and memory live on each engine, so separate
conversations never see each other's state.
"""

from pathlib import Path
from typing import Optional, Union

from eliza.config.constants import DEFAULT_MEMORY_CAPACITY
from eliza.conversation.engine import ResponderEngine
from eliza.rules.loader import load_default_rules, load_rules
from eliza.rules.types import RuleSet


class ElizaContainer:
    """
    Dependency injection container for the responder.

    Manages the shared RuleSet singleton and provides factories for
    components that depend on it.

    Attributes:
        _rules: Shared, read-only rule database
        _memory_capacity: Memory bound given to every new engine

    Example:
        >>> container = ElizaContainer()
        >>> alice = container.create_engine()
        >>> bob = container.create_engine()
        >>> # Both read the same RuleSet; cursors and memory are separate
    """

    def __init__(
        self,
        rules: Optional[RuleSet] = None,
        rules_path: Optional[Union[str, Path]] = None,
        memory_capacity: int = DEFAULT_MEMORY_CAPACITY,
    ):
        """
        Initialize container with a rule database.

        Args:
            rules: Already-built RuleSet (takes precedence over rules_path)
            rules_path: JSON rule file; the bundled doctor script when omitted
            memory_capacity: Deferred replies kept per conversation

        Raises:
            RuleConfigError: If the rule file is malformed
        """
        if rules is None:
            rules = load_rules(rules_path) if rules_path else load_default_rules()
        self._rules = rules
        self._memory_capacity = memory_capacity

    @classmethod
    def from_settings(cls, settings=None) -> "ElizaContainer":
        """Build a container from application settings."""
        if settings is None:
            from eliza.config.settings import settings
        return cls(rules_path=settings.rules_path, memory_capacity=settings.memory_capacity)

    @property
    def rules(self) -> RuleSet:
        """Get the shared RuleSet instance."""
        return self._rules

    @property
    def memory_capacity(self) -> int:
        return self._memory_capacity

    def create_engine(self, memory_capacity: Optional[int] = None) -> ResponderEngine:
        """
        Create a ResponderEngine for one conversation.

        Args:
            memory_capacity: Override the container's memory bound

        Returns:
            Fresh engine over the shared RuleSet
        """
        return ResponderEngine(
            self._rules,
            memory_capacity=memory_capacity or self._memory_capacity,
        )

    def create_session_registry(self, ttl: Optional[int] = None):
        """
        Create a SessionRegistry that opens one engine per conversation.

        Args:
            ttl: Idle seconds before a session expires (settings default when omitted)
        """
        from eliza.conversation.sessions import SessionRegistry
        return SessionRegistry(self, ttl=ttl)

    def __repr__(self) -> str:
        return f"ElizaContainer(rules={self._rules!r}, memory_capacity={self._memory_capacity})"
