# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Agent runtime: one model-backed reasoning run with tool calling.

Each agent variant has exactly one AgentRuntime per process. A run:

1. Reads the agent's own dialogue history from the checkpoint store
2. Sends system prompt + freshly assembled context + history + new message
3. Executes requested tools and feeds their results back, bounded by a
   reasoning-step cap
4. Validates the final text with the output guard
5. Appends the new user message and the final reply to the history

Model unavailability, model failures and rejected output all degrade to
the deterministic fallback; none of them raise into the router.

Example:
    runtime = AgentRuntime(
        variant=AgentVariant.TEACHER,
        config=load_agent_config(AgentVariant.TEACHER, config_dir),
        llm_client=create_llm_client(),
        tool_registry=create_registry_from_config(config.tools),
        checkpoint_store=CheckpointStore(get_checkpointer_instance()),
    )
    result = await runtime.run(thread_id, context, "Explain it again", tool_context)
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import yaml

from src.core.agents.context import AgentConfig
from src.core.agents.fallbacks import create_simple_response
from src.core.agents.output_guard import OutputGuard
from src.core.agents.variants import AgentVariant
from src.core.intelligence.llm.client import LLMClient, LLMError
from src.core.orchestration.checkpoint_store import CheckpointStore
from src.core.orchestration.checkpointer import create_agent_thread_id
from src.core.tools.base import ToolContext
from src.core.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)

STEP_LIMIT_MESSAGE = (
    "I spent longer than expected working through that and had to stop before "
    "finishing. Your progress on {subject} is saved. Could you ask again, "
    "perhaps focusing on one thing at a time?"
)

DUPLICATE_TOOL_MESSAGE = (
    "Tool {name} was already called with these parameters. Use the previous result."
)


@dataclass
class AgentRunResult:
    """Outcome of one agent run.

    Attributes:
        text: Reply body with the agent header prefixed.
        agent_tag: Tag labelling this part in a composite reply.
        variant: Agent variant that produced the reply.
        tool_calls: Tool calls executed during the run.
        state_updates: Orchestration hints returned by tools, in call order.
        degraded: True when the deterministic fallback was used.
        steps: Number of model calls made.
        aborted: True when the reasoning-step cap ended the run.
    """

    text: str
    agent_tag: str
    variant: AgentVariant
    tool_calls: list[dict[str, Any]] = field(default_factory=list)
    state_updates: list[dict[str, Any]] = field(default_factory=list)
    degraded: bool = False
    steps: int = 0
    aborted: bool = False

    @property
    def created_items(self) -> bool:
        """Whether any successful creation tool ran during this run."""
        return any(
            call["name"].startswith("create_") and call.get("success")
            for call in self.tool_calls
        )


class AgentRuntime:
    """Runs one agent variant against the model with its configured tools.

    Attributes:
        variant: Agent variant served by this runtime.
        config: Agent configuration loaded from YAML.
    """

    def __init__(
        self,
        variant: AgentVariant,
        config: AgentConfig,
        llm_client: LLMClient | None,
        tool_registry: ToolRegistry,
        checkpoint_store: CheckpointStore,
        output_guard: OutputGuard | None = None,
        max_steps: int = 25,
        max_history_messages: int = 40,
    ) -> None:
        """Initialize the runtime.

        Args:
            variant: Agent variant served by this runtime.
            config: Agent configuration for the variant.
            llm_client: Model client, or None for permanent fallback mode.
            tool_registry: Tools this agent may call.
            checkpoint_store: Dialogue history store.
            output_guard: Output validator. Default classifiers if None.
            max_steps: Maximum model calls per run.
            max_history_messages: Most recent history messages replayed to
                the model.
        """
        self.variant = variant
        self.config = config
        self._llm_client = llm_client
        self._tool_registry = tool_registry
        self._checkpoint_store = checkpoint_store
        self._output_guard = output_guard or OutputGuard()
        self._max_steps = max_steps
        self._max_history_messages = max_history_messages

        if llm_client is None:
            logger.warning(
                "Agent %s has no model client, replies will be templated",
                variant.value,
            )

    @property
    def is_degraded(self) -> bool:
        """Whether this runtime is in permanent fallback mode."""
        return self._llm_client is None

    def _with_header(self, body: str) -> str:
        return f"{self.config.header}\n\n{body}"

    def _build_system_prompt(self, context: dict[str, Any]) -> str:
        serialized = yaml.safe_dump(
            context,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
        return (
            f"{self.config.system_prompt.render()}\n\n"
            f"## Current Session Context\n{serialized}"
        )

    async def run(
        self,
        thread_id: str,
        context: dict[str, Any],
        user_message: str,
        tool_context: ToolContext,
    ) -> AgentRunResult:
        """Run the agent for one turn.

        Args:
            thread_id: Conversation thread; the agent's history lives under
                ``thread_id:variant``.
            context: Freshly assembled session context for this agent.
            user_message: The new message to answer.
            tool_context: Session scope for tool execution.

        Returns:
            AgentRunResult with the headed reply text.
        """
        start_time = datetime.now()
        thread_key = create_agent_thread_id(thread_id, self.variant.value)

        def fallback() -> str:
            return create_simple_response(self.variant, user_message, context)

        if self._llm_client is None:
            body = fallback()
            await self._remember(thread_key, user_message, body)
            return AgentRunResult(
                text=self._with_header(body),
                agent_tag=self.variant.tag,
                variant=self.variant,
                degraded=True,
            )

        history = self._recent(await self._checkpoint_store.read(thread_key))
        messages: list[dict[str, Any]] = [
            {"role": "system", "content": self._build_system_prompt(context)}
        ]
        messages.extend(history)
        messages.append({"role": "user", "content": user_message})

        result = AgentRunResult(text="", agent_tag=self.variant.tag, variant=self.variant)

        try:
            raw = await self._reason(messages, tool_context, result)
        except LLMError as e:
            logger.warning(
                "Model call failed for agent %s, using fallback: %s",
                self.variant.value,
                e.message,
            )
            raw = None
            result.degraded = True

        if result.aborted:
            body = STEP_LIMIT_MESSAGE.format(subject=_subject(context))
        else:
            guarded = self._output_guard.validate(
                raw,
                min_length=self.config.min_output_length,
                fallback=fallback,
                agent_id=self.variant.value,
            )
            body = guarded.text
            result.degraded = result.degraded or not guarded.accepted

        await self._remember(thread_key, user_message, body)
        result.text = self._with_header(body)

        logger.info(
            "Agent run completed: agent=%s, steps=%d, tool_calls=%d, "
            "degraded=%s, aborted=%s, duration_ms=%.0f",
            self.variant.value,
            result.steps,
            len(result.tool_calls),
            result.degraded,
            result.aborted,
            (datetime.now() - start_time).total_seconds() * 1000,
        )
        return result

    async def _reason(
        self,
        messages: list[dict[str, Any]],
        tool_context: ToolContext,
        result: AgentRunResult,
    ) -> Any:
        """Tool calling loop.

        Returns the raw content of the final model response, or None when
        the step cap was hit.
        """
        assert self._llm_client is not None
        model = self.config.llm.model or self._llm_client.model
        is_ollama = model.startswith("ollama/") or model.startswith("ollama_chat/")
        is_gemini = model.startswith("gemini/")

        def format_arguments(args: Any) -> str | dict:
            # Ollama expects a dict, other providers a JSON string
            if is_ollama:
                return args if isinstance(args, dict) else json.loads(args)
            return json.dumps(args) if isinstance(args, dict) else args

        def tool_message(call_id: str, name: str, content: str) -> dict[str, Any]:
            msg: dict[str, Any] = {"role": "tool", "tool_call_id": call_id, "content": content}
            # Gemini rejects the name field on tool messages
            if not is_gemini:
                msg["name"] = name
            return msg

        current_tools = (
            self._tool_registry.get_definitions() if self.config.tools.enabled else []
        )
        called_signatures: set[str] = set()

        while result.steps < self._max_steps:
            result.steps += 1

            response = await self._llm_client.complete_with_tools(
                messages=messages,
                tools=current_tools,
                tool_choice=self.config.tools.tool_choice,
                model=model,
                temperature=self.config.llm.temperature,
                max_tokens=self.config.llm.max_tokens,
            )

            if not response.has_tool_calls:
                return response.content

            messages.append(
                {
                    "role": "assistant",
                    "content": response.content if isinstance(response.content, str) else "",
                    "tool_calls": [
                        {
                            "id": tc.id,
                            "type": "function",
                            "function": {
                                "name": tc.name,
                                "arguments": format_arguments(tc.arguments),
                            },
                        }
                        for tc in response.tool_calls
                    ],
                }
            )

            logger.info(
                "Agent %s requested tools: %s",
                self.variant.value,
                [tc.name for tc in response.tool_calls],
            )
            stop_chaining = False

            for tool_call in response.tool_calls:
                # Null, missing and empty arguments are equivalent
                normalized = {
                    k: v for k, v in tool_call.arguments.items() if v is not None and v != ""
                }
                encoded = json.dumps(normalized, sort_keys=True, default=str)
                signature = f"{tool_call.name}:{encoded}"

                if signature in called_signatures:
                    logger.warning("Skipping duplicate tool call: %s", tool_call.name)
                    messages.append(
                        tool_message(
                            tool_call.id,
                            tool_call.name,
                            DUPLICATE_TOOL_MESSAGE.format(name=tool_call.name),
                        )
                    )
                    continue
                called_signatures.add(signature)

                tool_result = await self._tool_registry.execute(
                    tool_call.name, tool_call.arguments, tool_context
                )
                result.tool_calls.append(
                    {
                        "id": tool_call.id,
                        "name": tool_call.name,
                        "arguments": tool_call.arguments,
                        "success": tool_result.success,
                        "error": tool_result.error,
                    }
                )
                if tool_result.state_update:
                    result.state_updates.append(tool_result.state_update)
                if tool_result.stop_chaining:
                    stop_chaining = True

                messages.append(
                    tool_message(tool_call.id, tool_call.name, tool_result.to_llm_message())
                )

            if stop_chaining:
                # Force a text answer on the next step
                current_tools = []

        logger.warning(
            "Agent %s hit the reasoning step cap (%d), aborting turn",
            self.variant.value,
            self._max_steps,
        )
        result.aborted = True
        return None

    def _recent(self, history: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Keep the newest history messages, starting on a user message."""
        if len(history) <= self._max_history_messages:
            return history
        recent = history[-self._max_history_messages :]
        while recent and recent[0].get("role") != "user":
            recent = recent[1:]
        return recent

    async def _remember(self, thread_key: str, user_message: str, body: str) -> None:
        await self._checkpoint_store.append(thread_key, {"role": "user", "content": user_message})
        await self._checkpoint_store.append(thread_key, {"role": "assistant", "content": body})


def _subject(context: dict[str, Any]) -> str:
    return context.get("topic") or context.get("primary_concern") or "this session"
