# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Agent layer: variants, configuration, runtime, output guard and fallbacks.

Components:
    AgentVariant: The closed set of agents a router can select.
    AgentConfig: Per-variant configuration loaded from YAML.
    AgentRuntime: One model-backed reasoning run with tool calling.
    OutputGuard: Validation of model output before it is shown.
    create_simple_response: Deterministic replies used in degraded mode.

Usage:
    config = load_agent_config(AgentVariant.TEACHER, settings.orchestration.agents_config_dir)
    runtime = AgentRuntime(AgentVariant.TEACHER, config, llm_client, registry, store)
"""

from src.core.agents.context import (
    AgentConfig,
    AgentError,
    AgentLLMConfig,
    SystemPromptConfig,
    SystemPromptRule,
    ToolDefinitionConfig,
    ToolsConfig,
    load_agent_config,
)
from src.core.agents.fallbacks import create_simple_response
from src.core.agents.output_guard import GuardResult, OutputGuard
from src.core.agents.runtime import AgentRunResult, AgentRuntime
from src.core.agents.variants import LEARNING_VARIANTS, THERAPY_VARIANTS, AgentVariant

__all__ = [
    "AgentVariant",
    "LEARNING_VARIANTS",
    "THERAPY_VARIANTS",
    # Configuration
    "AgentConfig",
    "AgentError",
    "AgentLLMConfig",
    "SystemPromptConfig",
    "SystemPromptRule",
    "ToolDefinitionConfig",
    "ToolsConfig",
    "load_agent_config",
    # Runtime
    "AgentRuntime",
    "AgentRunResult",
    "OutputGuard",
    "GuardResult",
    "create_simple_response",
]
