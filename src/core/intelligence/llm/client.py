# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LLM client using LiteLLM for multi-provider support.

This module is the model-calling capability used by every agent: given a
message list and a set of tool schemas, it returns either text or a set
of tool invocation requests.

API keys and endpoints are passed directly to LiteLLM's acompletion()
rather than through environment variables.

Supported providers:
- Google: Gemini models (default)
- OpenAI, Anthropic
- Ollama: Local inference

Example:
    >>> from src.core.intelligence.llm import create_llm_client
    >>> client = create_llm_client()
    >>> if client is not None:
    ...     response = await client.complete_with_tools(messages, tools)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import litellm
from litellm import acompletion

from src.core.config.settings import LLMSettings, get_settings

logger = logging.getLogger(__name__)


@dataclass
class ToolCall:
    """A tool call requested by the LLM.

    Attributes:
        id: Unique identifier for this tool call.
        name: Name of the tool to execute.
        arguments: Arguments to pass to the tool.
    """

    id: str
    name: str
    arguments: dict[str, Any]


@dataclass
class LLMToolResponse:
    """Response from an LLM completion with tool calling support.

    Attributes:
        content: The generated content exactly as the provider returned it.
            Usually a string, but some providers return a list of content
            fragments or an object; callers extract text themselves.
        model: The model that generated the response.
        tokens_input: Number of input tokens used.
        tokens_output: Number of output tokens generated.
        finish_reason: Why generation stopped (stop, tool_calls, length, etc.).
        tool_calls: List of tool calls requested by the LLM.
        raw_response: Original response object from LiteLLM.
    """

    content: Any
    model: str
    tokens_input: int = 0
    tokens_output: int = 0
    finish_reason: str = "stop"
    tool_calls: list[ToolCall] = field(default_factory=list)
    raw_response: Optional[object] = field(default=None, repr=False)

    @property
    def total_tokens(self) -> int:
        """Get total tokens used (input + output)."""
        return self.tokens_input + self.tokens_output

    @property
    def has_tool_calls(self) -> bool:
        """Check if response contains tool calls."""
        return len(self.tool_calls) > 0


class LLMError(Exception):
    """Exception raised when LLM operation fails.

    Attributes:
        message: Error description.
        model: Model that caused the error.
        error_code: Error code if available.
        original_error: Original exception if any.
    """

    def __init__(
        self,
        message: str,
        model: Optional[str] = None,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.model = model
        self.error_code = error_code
        self.original_error = original_error
        super().__init__(self.message)


class LLMConfigurationError(LLMError):
    """Raised when the model cannot be constructed (e.g., missing credential)."""


class LLMClient:
    """Client for tool-calling completions via LiteLLM.

    Attributes:
        model: Default model to use for completions.
        timeout: Request timeout in seconds.
        max_retries: Maximum retry attempts.

    Example:
        >>> client = LLMClient()
        >>> response = await client.complete_with_tools(
        ...     messages=[{"role": "user", "content": "Hi"}],
        ...     tools=[],
        ... )
    """

    def __init__(
        self,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        llm_settings: Optional[LLMSettings] = None,
    ):
        """Initialize the LLM client.

        Args:
            model: Default model in LiteLLM format. Falls back to settings.
            timeout: Request timeout in seconds. Falls back to settings.
            max_retries: Maximum retry attempts. Falls back to settings.
            llm_settings: LLM configuration. Uses get_settings() if None.

        Raises:
            LLMConfigurationError: If the configured provider has no credential.
        """
        self._settings = llm_settings or get_settings().llm

        if not self._settings.is_configured:
            raise LLMConfigurationError(
                message=(
                    f"No API key configured for provider "
                    f"'{self._settings.default_provider}'"
                ),
                model=model,
                error_code="missing_credential",
            )

        self._model = model or self._settings.get_default_model()
        self._timeout = timeout or self._settings.request_timeout
        self._max_retries = max_retries or self._settings.max_retries

        litellm.drop_params = True

        logger.info(
            "LLMClient initialized with model=%s, timeout=%.1fs, max_retries=%d",
            self._model,
            self._timeout,
            self._max_retries,
        )

    def _get_provider_params(self) -> dict[str, Any]:
        """Get provider-specific parameters passed straight to acompletion().

        Returns:
            Dictionary with api_key and/or api_base.
        """
        if self._settings.default_provider == "ollama":
            return {"api_base": self._settings.ollama_base_url}

        api_key = self._settings.get_api_key()
        return {"api_key": api_key} if api_key else {}

    @property
    def model(self) -> str:
        """Get the default model."""
        return self._model

    @property
    def timeout(self) -> float:
        """Get the request timeout in seconds."""
        return self._timeout

    @property
    def max_retries(self) -> int:
        """Get the maximum retry attempts."""
        return self._max_retries

    async def complete_with_tools(
        self,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]],
        tool_choice: str = "auto",
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: int = 2048,
        **kwargs: Any,
    ) -> LLMToolResponse:
        """Generate a completion with tool calling support.

        The response may contain tool_calls that should be executed, with
        results sent back in a follow-up call.

        Args:
            messages: Conversation messages in OpenAI format.
                Tool results use role='tool' with 'tool_call_id'.
            tools: Tool definitions in OpenAI format. May be empty.
            tool_choice: How the model should use tools ("auto", "none",
                "required").
            model: Override default model for this request.
            temperature: Sampling temperature (0-2).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional LiteLLM parameters.

        Returns:
            LLMToolResponse with content and/or tool_calls.

        Raises:
            LLMError: If completion fails after retries.
            ValueError: If messages list is empty.
        """
        if not messages:
            raise ValueError("Messages list cannot be empty")

        use_model = model or self._model
        request: dict[str, Any] = {
            "model": use_model,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "timeout": self._timeout,
            "num_retries": self._max_retries,
        }
        # Some providers reject tool_choice without tools
        if tools:
            request["tools"] = tools
            request["tool_choice"] = tool_choice

        try:
            response = await acompletion(
                **request,
                **self._get_provider_params(),
                **kwargs,
            )
        except Exception as e:
            logger.error(
                "Tool completion failed: model=%s, error=%s",
                use_model,
                str(e),
            )
            raise LLMError(
                message=f"Tool completion failed: {str(e)}",
                model=use_model,
                original_error=e,
            ) from e

        if not response.choices:
            logger.error(
                "LLM returned empty choices: model=%s, response=%s",
                use_model,
                str(response)[:1000],
            )
            raise LLMError(
                message="LLM returned empty response with no choices",
                model=use_model,
                error_code="empty_choices",
            )

        message = response.choices[0].message
        finish_reason = response.choices[0].finish_reason or "stop"

        parsed_tool_calls: list[ToolCall] = []
        for tc in getattr(message, "tool_calls", None) or []:
            # Arguments may be a dict or a JSON string depending on provider
            if isinstance(tc.function.arguments, dict):
                args = tc.function.arguments
            else:
                try:
                    args = json.loads(tc.function.arguments or "{}")
                except (json.JSONDecodeError, TypeError):
                    logger.warning(
                        "Unparseable tool arguments for %s: %r",
                        tc.function.name,
                        tc.function.arguments,
                    )
                    args = {}

            parsed_tool_calls.append(
                ToolCall(
                    id=tc.id,
                    name=tc.function.name,
                    arguments=args if isinstance(args, dict) else {},
                )
            )

        usage = getattr(response, "usage", None)
        tokens_input = getattr(usage, "prompt_tokens", 0) or 0
        tokens_output = getattr(usage, "completion_tokens", 0) or 0

        logger.debug(
            "Tool completion generated: model=%s, tokens_in=%d, tokens_out=%d, tool_calls=%d",
            use_model,
            tokens_input,
            tokens_output,
            len(parsed_tool_calls),
        )

        return LLMToolResponse(
            content=message.content,
            model=use_model,
            tokens_input=tokens_input,
            tokens_output=tokens_output,
            finish_reason=finish_reason,
            tool_calls=parsed_tool_calls,
            raw_response=response,
        )

    def __repr__(self) -> str:
        return (
            f"LLMClient(model={self._model!r}, "
            f"timeout={self._timeout}, max_retries={self._max_retries})"
        )


def create_llm_client(llm_settings: Optional[LLMSettings] = None) -> Optional[LLMClient]:
    """Create the shared LLM client, or None when the model is unavailable.

    A missing credential puts every agent into permanent fallback mode;
    this is logged once here and never surfaced to users.

    Args:
        llm_settings: LLM configuration. Uses get_settings() if None.

    Returns:
        Configured LLMClient, or None if it cannot be constructed.
    """
    try:
        return LLMClient(llm_settings=llm_settings)
    except LLMConfigurationError as e:
        logger.warning("LLM unavailable, agents will use templated replies: %s", e.message)
        return None
