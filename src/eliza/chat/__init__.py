"""
Interactive REPL over one responder conversation.

ChatInterface and main are resolved on first access so ``python -m
eliza.chat`` does not import the interface module twice.
"""

_LAZY = {"ChatInterface", "HELP_TEXT", "main"}


def __getattr__(name: str):
    if name in _LAZY:
        from eliza.chat import interface
        return getattr(interface, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = sorted(_LAZY)
