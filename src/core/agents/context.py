# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Agent configuration models.

This module provides:
- AgentLLMConfig: generation settings for an agent
- SystemPromptConfig: role text and rules making up the system prompt
- ToolsConfig: which tools an agent may call
- AgentConfig: agent configuration loaded from YAML
- AgentError: agent configuration errors

Usage:
    config = AgentConfig.from_yaml("config/agents/teacher.yaml")
    registry = create_registry_from_config(config.tools)
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from src.core.agents.variants import AgentVariant


class AgentError(Exception):
    """Exception raised for agent-related errors.

    Attributes:
        message: Error description.
        agent_id: Agent that raised the error.
        original_error: Original exception if any.
    """

    def __init__(
        self,
        message: str,
        agent_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.agent_id = agent_id
        self.original_error = original_error
        super().__init__(self.message)


class AgentLLMConfig(BaseModel):
    """LLM configuration for an agent.

    Attributes:
        model: Optional LiteLLM model override. Uses the configured
            provider's default if not specified.
        temperature: Temperature for generation.
        max_tokens: Maximum tokens for generation.

    Example:
        llm:
          temperature: 0.3
          max_tokens: 4096
    """

    model: str | None = Field(
        default=None,
        description="Optional model override",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for generation",
    )
    max_tokens: int = Field(
        default=2048,
        ge=1,
        description="Maximum tokens for generation",
    )


class SystemPromptRule(BaseModel):
    """A single rule in the system prompt.

    Rules are rendered as numbered sections after the role text.

    Example YAML:
        rules:
          - id: use_context_ids
            title: "Only Use IDs From The Context"
            content: |
              Never invent an id. Only pass ids listed in the context.
    """

    id: str = Field(description="Unique rule identifier")
    title: str = Field(description="Rule title for section header")
    content: str = Field(description="Rule content with instructions")


class SystemPromptConfig(BaseModel):
    """System prompt configuration from YAML.

    The prompt sent on every turn is the role text, then the rules, then
    the freshly assembled session context.
    """

    role: str = Field(description="Role definition - core identity")
    rules: list[SystemPromptRule] = Field(
        default_factory=list,
        description="Critical rules to follow",
    )

    def render(self) -> str:
        """Render role and rules as prompt text."""
        parts = [self.role.strip()]
        for number, rule in enumerate(self.rules, start=1):
            parts.append(f"## {number}. {rule.title}\n{rule.content.strip()}")
        return "\n\n".join(parts)


class ToolDefinitionConfig(BaseModel):
    """Configuration for a single tool.

    Example YAML:
        definitions:
          - name: mark_concept_progress
            enabled: true
            order: 1
    """

    name: str = Field(description="Tool name matching a manifest entry")
    enabled: bool = Field(default=True, description="Whether tool is enabled")
    order: int = Field(default=0, description="Registration order")


class ToolsConfig(BaseModel):
    """Tools configuration for an agent.

    Attributes:
        enabled: Whether tool calling is enabled for this agent.
        tool_choice: How the LLM should use tools ('auto', 'none', 'required').
        definitions: List of tool definitions with enable/disable control.
    """

    enabled: bool = Field(default=True, description="Whether tool calling is enabled")
    tool_choice: str = Field(
        default="auto",
        description="How LLM should use tools: 'auto', 'none', 'required'",
    )
    definitions: list[ToolDefinitionConfig] = Field(
        default_factory=list,
        description="Tool definitions",
    )

    def get_enabled_tools(self) -> list[str]:
        """Get list of enabled tool names."""
        return [t.name for t in sorted(self.definitions, key=lambda t: t.order) if t.enabled]


class AgentConfig(BaseModel):
    """Agent configuration loaded from YAML.

    Defines WHAT an agent may do (tools) and HOW it is presented and
    configured (header, LLM settings, system prompt, output threshold).

    Attributes:
        id: Agent variant value, e.g. "teacher".
        name: Display name used in the reply header.
        icon: Emoji shown before the display name.
        description: Agent description.
        version: Configuration version.
        min_output_length: Model replies shorter than this are replaced
            by the deterministic fallback.
        llm: LLM configuration.
        tools: Tool calling configuration.
        system_prompt: System prompt configuration.
    """

    id: str = Field(description="Agent variant value")
    name: str = Field(description="Human-readable agent name")
    icon: str = Field(default="🤖", description="Header icon")
    description: str = Field(default="", description="Agent description")
    version: str = Field(default="1.0", description="Configuration version")
    min_output_length: int = Field(
        default=10,
        ge=0,
        description="Minimum accepted model output length",
    )
    llm: AgentLLMConfig = Field(
        default_factory=AgentLLMConfig,
        description="LLM configuration",
    )
    tools: ToolsConfig = Field(
        default_factory=ToolsConfig,
        description="Tool calling configuration",
    )
    system_prompt: SystemPromptConfig = Field(
        description="System prompt configuration",
    )

    @property
    def header(self) -> str:
        """Header prefixed to every reply of this agent."""
        return f"{self.icon} **{self.name}**"

    @property
    def variant(self) -> AgentVariant:
        """The agent variant this configuration belongs to."""
        return AgentVariant(self.id)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "AgentConfig":
        """Load agent configuration from YAML file.

        Args:
            path: Path to YAML configuration file.

        Returns:
            AgentConfig instance.

        Raises:
            AgentError: If the file is missing or its structure is invalid.
        """
        path = Path(path)
        if not path.exists():
            raise AgentError(f"Agent config not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict) or "agent" not in data:
            raise AgentError(f"Invalid agent config: missing 'agent' key in {path}")

        try:
            config = cls.model_validate(data["agent"])
        except ValidationError as e:
            raise AgentError(
                f"Invalid agent config in {path}",
                agent_id=data["agent"].get("id") if isinstance(data["agent"], dict) else None,
                original_error=e,
            ) from e

        if config.id not in {v.value for v in AgentVariant}:
            raise AgentError(f"Unknown agent variant '{config.id}' in {path}", agent_id=config.id)

        return config


def load_agent_config(variant: AgentVariant, config_dir: str | Path) -> AgentConfig:
    """Load the YAML configuration of one agent variant.

    Args:
        variant: Agent variant to load.
        config_dir: Directory holding one ``<variant>.yaml`` per agent.

    Returns:
        The validated configuration.

    Raises:
        AgentError: If the file is missing, invalid, or declares another variant.
    """
    config = AgentConfig.from_yaml(Path(config_dir) / f"{variant.value}.yaml")
    if config.variant is not variant:
        raise AgentError(
            f"Config for '{variant.value}' declares id '{config.id}'",
            agent_id=variant.value,
        )
    return config
