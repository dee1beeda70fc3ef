"""Core domain package for namewatch.

Core contains extraction, name resolution, activation, deduplication and
delivery logic without any Telegram, HTTP or file-specific code, keeping the
business logic portable.
"""
