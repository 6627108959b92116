# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Agent factory for creating AgentRuntime instances from YAML configuration.

This module provides the AgentFactory which:
- Loads one agent configuration per variant from YAML files
- Builds each runtime with its own tool registry
- Caches runtimes so every variant has exactly one per process

Usage:
    # Get the factory singleton
    factory = get_agent_factory()

    # Get the runtime of a variant
    teacher = factory.get(AgentVariant.TEACHER)

    result = await teacher.run(thread_id, context, message, tool_context)
"""

import logging
from pathlib import Path
from typing import Optional

from src.core.agents.context import AgentConfig, AgentError, load_agent_config
from src.core.agents.output_guard import OutputGuard
from src.core.agents.runtime import AgentRuntime
from src.core.agents.variants import AgentVariant
from src.core.config.settings import OrchestrationSettings, get_settings
from src.core.intelligence.llm.client import LLMClient, create_llm_client
from src.core.orchestration.checkpoint_store import CheckpointStore
from src.core.orchestration.checkpointer import get_checkpointer_instance
from src.tools.loader import create_registry_from_config

logger = logging.getLogger(__name__)


class AgentFactory:
    """Factory for creating AgentRuntime instances.

    Attributes:
        agents_dir: Path to agent configuration files.

    Example:
        >>> factory = AgentFactory(llm_client, checkpoint_store, settings.orchestration)
        >>> teacher = factory.get(AgentVariant.TEACHER)
        >>> assert factory.get(AgentVariant.TEACHER) is teacher
    """

    def __init__(
        self,
        llm_client: LLMClient | None,
        checkpoint_store: CheckpointStore,
        orchestration: OrchestrationSettings,
        agents_dir: Optional[Path] = None,
        output_guard: Optional[OutputGuard] = None,
    ):
        """Initialize the AgentFactory.

        Args:
            llm_client: Shared model client, or None for fallback mode.
            checkpoint_store: Shared dialogue history store.
            orchestration: Step cap and output length thresholds.
            agents_dir: Path to agent configuration directory.
            output_guard: Shared output guard.
        """
        self._llm_client = llm_client
        self._checkpoint_store = checkpoint_store
        self._orchestration = orchestration
        self.agents_dir = Path(agents_dir or orchestration.agents_config_dir)
        self._output_guard = output_guard or OutputGuard()
        self._runtimes: dict[AgentVariant, AgentRuntime] = {}

        logger.info(
            "AgentFactory initialized: agents_dir=%s, degraded=%s",
            self.agents_dir,
            llm_client is None,
        )

    def get(self, variant: AgentVariant) -> AgentRuntime:
        """Get or create the runtime of a variant.

        Args:
            variant: Agent variant.

        Returns:
            The cached AgentRuntime for the variant.

        Raises:
            AgentError: If the variant's configuration is missing or invalid.
        """
        if variant not in self._runtimes:
            self._runtimes[variant] = self.create(variant)
        return self._runtimes[variant]

    def create(self, variant: AgentVariant) -> AgentRuntime:
        """Create a new runtime (not cached).

        Args:
            variant: Agent variant.

        Returns:
            New AgentRuntime instance.

        Raises:
            AgentError: If configuration loading or tool registration fails.
        """
        config = self._load_config(variant)

        try:
            registry = create_registry_from_config(config.tools)
        except ValueError as e:
            raise AgentError(
                message=f"Invalid tool configuration: {e}",
                agent_id=variant.value,
                original_error=e,
            ) from e

        runtime = AgentRuntime(
            variant=variant,
            config=config,
            llm_client=self._llm_client,
            tool_registry=registry,
            checkpoint_store=self._checkpoint_store,
            output_guard=self._output_guard,
            max_steps=self._orchestration.max_reasoning_steps,
            max_history_messages=self._orchestration.max_history_messages,
        )

        logger.info(
            "Created agent runtime: variant=%s, tools=%s, min_output_length=%d",
            variant.value,
            registry.list_names(),
            config.min_output_length,
        )
        return runtime

    def _load_config(self, variant: AgentVariant) -> AgentConfig:
        config = load_agent_config(variant, self.agents_dir)
        # Threshold not set in YAML falls back to the configured default
        if "min_output_length" not in config.model_fields_set:
            config.min_output_length = (
                self._orchestration.min_plan_output_length
                if variant.is_planning
                else self._orchestration.min_output_length
            )
        return config

    def clear_cache(self) -> None:
        """Clear all cached runtimes."""
        self._runtimes.clear()
        logger.debug("Agent runtime cache cleared")

    def __repr__(self) -> str:
        runtimes = ", ".join(v.value for v in self._runtimes)
        return f"AgentFactory(runtimes=[{runtimes}])"


# Module-level singleton instance
_factory: Optional[AgentFactory] = None


def get_agent_factory(
    llm_client: Optional[LLMClient] = None,
    checkpoint_store: Optional[CheckpointStore] = None,
    agents_dir: Optional[Path] = None,
) -> AgentFactory:
    """Get the singleton AgentFactory instance.

    On first call, missing dependencies are created from settings.
    Subsequent calls return the cached instance, ignoring parameters.

    Args:
        llm_client: Model client. Created from settings if None.
        checkpoint_store: Dialogue history store. Uses the configured
            checkpointer if None.
        agents_dir: Path to agent configuration directory.

    Returns:
        The AgentFactory singleton instance.
    """
    global _factory

    if _factory is None:
        settings = get_settings()

        if llm_client is None:
            llm_client = create_llm_client(settings.llm)

        if checkpoint_store is None:
            checkpoint_store = CheckpointStore(get_checkpointer_instance())

        _factory = AgentFactory(
            llm_client=llm_client,
            checkpoint_store=checkpoint_store,
            orchestration=settings.orchestration,
            agents_dir=agents_dir,
        )

    return _factory


def reset_agent_factory() -> None:
    """Reset the singleton AgentFactory instance.

    This is primarily useful for testing.
    """
    global _factory
    _factory = None
