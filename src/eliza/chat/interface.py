#!/usr/bin/env python3
"""
Chat interface for the Eliza responder.

Provides an interactive REPL: plain lines are answered by the responder,
slash commands inspect or reset the conversation.
"""

from dotenv import load_dotenv
load_dotenv()  # Load .env file before other imports

import logging
from typing import Optional

from eliza.config.settings import Settings
from eliza.container import ElizaContainer

logger = logging.getLogger(__name__)


class ChatInterface:
    """
    Interactive chat interface for one conversation.

    Commands:
    - /help - Show help
    - /reset - Start the conversation over
    - /stats - Show conversation statistics
    - /memory - Show deferred replies waiting to be recalled
    - /exit - Exit

    Example session:
        > I am sad
        I am sorry to hear that you are sad.

        > My mother is strict
        Tell me more about your family.
    """

    def __init__(
        self,
        rules_path: Optional[str] = None,
        memory_capacity: Optional[int] = None,
        container: Optional[ElizaContainer] = None,
    ):
        """
        Initialize chat interface.

        Args:
            rules_path: JSON rule file (bundled doctor script when omitted)
            memory_capacity: Deferred replies kept (settings default when omitted)
            container: Pre-built container (overrides the other arguments)
        """
        if container is None:
            settings = Settings()
            container = ElizaContainer(
                rules_path=rules_path or settings.rules_path,
                memory_capacity=memory_capacity or settings.memory_capacity,
            )
        self.container = container
        self.engine = container.create_engine()
        self.running = False

    def start(self) -> None:
        """Start interactive REPL."""
        print("=" * 60)
        print("  Eliza: Rule-Driven Conversation")
        print("=" * 60)
        print()
        print(self.engine.greeting())
        print()
        print("(Type naturally or use /help for commands)")
        print()

        self.running = True
        while self.running:
            try:
                user_input = input("> ")
            except (EOFError, KeyboardInterrupt):
                print(f"\n{self.engine.farewell()}")
                break

            reply = self.handle_line(user_input)
            if reply:
                print(f"\n{reply}\n")

    def handle_line(self, line: str) -> Optional[str]:
        """
        Process one line of input.

        Returns:
            Text to show, or None for empty input
        """
        line = line.strip()
        if not line:
            return None

        if line.startswith("/"):
            return self._handle_command(line)

        if self.engine.is_quit(line):
            self.running = False
            return self.engine.farewell()

        return self.engine.respond(line)

    def _handle_command(self, command: str) -> str:
        """Handle slash commands."""
        cmd = command.split(maxsplit=1)[0].lower()

        if cmd == "/help":
            return HELP_TEXT
        if cmd == "/exit":
            self.running = False
            return self.engine.farewell()
        if cmd == "/reset":
            self.engine.reset()
            return self.engine.greeting()
        if cmd == "/stats":
            return self._cmd_stats()
        if cmd == "/memory":
            return self._cmd_memory()
        return f"Unknown command: {cmd}. Use /help for commands."

    def _cmd_stats(self) -> str:
        stats = self.engine.stats()
        lines = [
            f"Turns: {stats['turns']}",
            f"Memory: {stats['memory_size']}/{stats['memory_capacity']}",
        ]
        hits = sorted(stats["keyword_hits"].items(), key=lambda kv: (-kv[1], kv[0]))
        if hits:
            lines.append("Keywords:")
            lines.extend(f"  {word}: {count}" for word, count in hits)
        return "\n".join(lines)

    def _cmd_memory(self) -> str:
        entries = self.engine.memory
        if not entries:
            return "(memory is empty)"
        return "\n".join(f"  {i}. {entry}" for i, entry in enumerate(entries, 1))


HELP_TEXT = """Just type naturally. Say 'bye' to leave.

Commands:
  /reset    Start the conversation over
  /stats    Show conversation statistics
  /memory   Show deferred replies waiting to be recalled
  /help     Show this help message
  /exit     Exit the program"""


def main(argv=None):
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Eliza rule-driven chatbot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Bundled doctor script
  eliza

  # Custom rule table
  eliza --rules ./my_rules.json
        """,
    )

    parser.add_argument(
        "--rules",
        default=None,
        help="JSON rule file (default: bundled doctor script, or ELIZA_RULES_PATH)",
    )

    parser.add_argument(
        "--memory",
        type=int,
        default=None,
        help="Deferred replies kept per conversation (default: ELIZA_MEMORY_CAPACITY or 10)",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)

    if args.debug or Settings().debug:
        logging.basicConfig(level=logging.DEBUG)

    interface = ChatInterface(rules_path=args.rules, memory_capacity=args.memory)
    interface.start()


if __name__ == "__main__":
    main()
