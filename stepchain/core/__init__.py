# stepchain/core/__init__.py
"""
Core engine for stepchain.

Subpackages:
- step: step records, keywords and ledger entries
- errors: fault taxonomy
- executor: the sequential runner, cancellation and hooks
- trace: observers that turn hook calls into trace events

No side effects on import.
"""
