"""Unit tests for the translation-management CLI.

This package contains test modules for all components of the CLI.
Tests use pytest with asyncio support and fake HTTP sessions via monkeypatch.
"""
