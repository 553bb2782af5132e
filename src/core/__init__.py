"""Core domain package for autoreply.

Core contains rule storage, keyword matching, and the reply routing decision
without any WhatsApp, LLM, or storage-specific code, keeping the business
logic portable.
"""
