#!/usr/bin/env python3
"""Entry point for running chat interface as a module.

Usage:
    python -m eliza.chat
    python -m eliza.chat --rules ./my_rules.json
"""


def main():
    # Import here to avoid circular import warning
    from eliza.chat.interface import main as run
    run()


if __name__ == "__main__":
    main()
