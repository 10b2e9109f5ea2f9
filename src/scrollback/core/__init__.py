"""Core domain package for scrollback.

Core holds pagination, indexing, search, jump and read-state logic without any
Telegram, storage or rendering code, keeping the behaviour portable and
testable against fakes.
"""
