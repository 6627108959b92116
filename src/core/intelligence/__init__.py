# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Intelligence module for AI-powered operations.

LiteLLM is the single interface to every model provider.
"""

from src.core.intelligence.llm import LLMClient, LLMError, create_llm_client

__all__ = [
    "LLMClient",
    "LLMError",
    "create_llm_client",
]
