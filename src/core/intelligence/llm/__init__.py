# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client module using LiteLLM.

Example:
    >>> from src.core.intelligence.llm import create_llm_client
    >>> client = create_llm_client()
"""

from src.core.intelligence.llm.client import (
    LLMClient,
    LLMConfigurationError,
    LLMError,
    LLMToolResponse,
    ToolCall,
    create_llm_client,
)

__all__ = [
    "LLMClient",
    "LLMConfigurationError",
    "LLMError",
    "LLMToolResponse",
    "ToolCall",
    "create_llm_client",
]
