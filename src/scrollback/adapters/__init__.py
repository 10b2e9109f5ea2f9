"""Adapters that bind the core ports to Telegram, SQLite and the console."""
