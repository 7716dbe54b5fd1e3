"""Synchronous client for OpenAI-compatible APIs: chat, assistants, audio and batches."""

__version__ = "0.1.0"