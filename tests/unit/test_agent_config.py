# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for agent YAML configuration and the agent factory."""

from pathlib import Path

import pytest
import yaml

from src.core.agents.context import AgentConfig, AgentError, load_agent_config
from src.core.agents.factory import AgentFactory
from src.core.agents.variants import AgentVariant
from src.core.config.settings import OrchestrationSettings
from tests.conftest import AGENTS_CONFIG_DIR

EXPECTED_TOOLS = {
    AgentVariant.PLANNER: ["create_concept_map", "create_practice_tasks"],
    AgentVariant.TEACHER: ["mark_concept_progress", "mark_task_progress"],
    AgentVariant.ASSESSMENT: ["create_therapy_goals", "create_therapy_exercises"],
    AgentVariant.PSYCHOTHERAPIST: ["mark_goal_progress", "mark_exercise_progress"],
    AgentVariant.COGNITIVE_RESTRUCTURING: ["record_structured_exercise"],
}


def write_config(directory: Path, variant: str, **overrides) -> Path:
    agent = {
        "id": variant,
        "name": "Test Agent",
        "system_prompt": {"role": "You are a test agent."},
    }
    agent.update(overrides)
    path = directory / f"{variant}.yaml"
    path.write_text(yaml.safe_dump({"agent": agent}), encoding="utf-8")
    return path


class TestShippedConfigs:
    """Tests for the agent YAML files shipped in config/agents."""

    @pytest.mark.parametrize("variant", list(AgentVariant))
    def test_loads(self, variant):
        """Test every variant has a valid configuration."""
        config = load_agent_config(variant, AGENTS_CONFIG_DIR)

        assert config.variant is variant
        assert config.system_prompt.role.strip()

    @pytest.mark.parametrize("variant", list(AgentVariant))
    def test_tool_sets(self, variant):
        """Test each agent only sees its own tools."""
        config = load_agent_config(variant, AGENTS_CONFIG_DIR)

        assert config.tools.get_enabled_tools() == EXPECTED_TOOLS[variant]

    @pytest.mark.parametrize(
        "variant,min_length",
        [(AgentVariant.PLANNER, 100), (AgentVariant.ASSESSMENT, 100), (AgentVariant.TEACHER, 10)],
    )
    def test_output_thresholds(self, variant, min_length):
        """Test plan-producing agents have the longer threshold."""
        assert load_agent_config(variant, AGENTS_CONFIG_DIR).min_output_length == min_length

    def test_header(self):
        """Test the header combines icon and bold name."""
        config = load_agent_config(AgentVariant.PLANNER, AGENTS_CONFIG_DIR)

        assert config.header == "🎯 **Learning Plan Agent**"


class TestAgentConfigLoading:
    """Tests for AgentConfig.from_yaml error handling."""

    def test_missing_file(self, tmp_path):
        """Test a missing file raises AgentError."""
        with pytest.raises(AgentError, match="not found"):
            AgentConfig.from_yaml(tmp_path / "nope.yaml")

    def test_missing_agent_key(self, tmp_path):
        """Test a file without the agent key is rejected."""
        path = tmp_path / "teacher.yaml"
        path.write_text("name: x\n", encoding="utf-8")

        with pytest.raises(AgentError, match="missing 'agent' key"):
            AgentConfig.from_yaml(path)

    def test_invalid_structure(self, tmp_path):
        """Test a structurally invalid config keeps the validation error."""
        path = write_config(tmp_path, "teacher", llm={"temperature": 5})

        with pytest.raises(AgentError) as exc_info:
            AgentConfig.from_yaml(path)

        assert exc_info.value.agent_id == "teacher"
        assert exc_info.value.original_error is not None

    def test_unknown_variant(self, tmp_path):
        """Test an id outside the closed variant set is rejected."""
        path = write_config(tmp_path, "unknown_agent")

        with pytest.raises(AgentError, match="Unknown agent variant"):
            AgentConfig.from_yaml(path)

    def test_variant_mismatch(self, tmp_path):
        """Test a file declaring another variant is rejected."""
        write_config(tmp_path, "teacher", id="planner")

        with pytest.raises(AgentError, match="declares id 'planner'"):
            load_agent_config(AgentVariant.TEACHER, tmp_path)

    def test_prompt_rendering(self):
        """Test rules are numbered after the role text."""
        config = AgentConfig.model_validate(
            {
                "id": "teacher",
                "name": "Teaching Agent",
                "system_prompt": {
                    "role": "You teach.\n",
                    "rules": [
                        {"id": "a", "title": "First", "content": "Do one."},
                        {"id": "b", "title": "Second", "content": "Do two."},
                    ],
                },
            }
        )

        assert config.system_prompt.render() == (
            "You teach.\n\n## 1. First\nDo one.\n\n## 2. Second\nDo two."
        )


class TestAgentFactory:
    """Tests for AgentFactory."""

    @pytest.fixture
    def factory(self, checkpoint_store):
        return AgentFactory(
            llm_client=None,
            checkpoint_store=checkpoint_store,
            orchestration=OrchestrationSettings(max_reasoning_steps=7),
            agents_dir=AGENTS_CONFIG_DIR,
        )

    def test_one_runtime_per_variant(self, factory):
        """Test runtimes are cached per variant."""
        teacher = factory.get(AgentVariant.TEACHER)

        assert factory.get(AgentVariant.TEACHER) is teacher
        assert factory.create(AgentVariant.TEACHER) is not teacher

    def test_runtime_configuration(self, factory):
        """Test runtimes carry the step cap and their own tools."""
        runtime = factory.get(AgentVariant.COGNITIVE_RESTRUCTURING)

        assert runtime._max_steps == 7
        assert runtime.is_degraded
        assert runtime._tool_registry.list_names() == ["record_structured_exercise"]

    def test_default_threshold_from_settings(self, tmp_path, checkpoint_store):
        """Test a config without a threshold uses the settings default."""
        write_config(tmp_path, "assessment")
        factory = AgentFactory(
            llm_client=None,
            checkpoint_store=checkpoint_store,
            orchestration=OrchestrationSettings(min_plan_output_length=150),
            agents_dir=tmp_path,
        )

        assert factory.get(AgentVariant.ASSESSMENT).config.min_output_length == 150

    def test_clear_cache(self, factory):
        """Test clearing the cache builds new runtimes."""
        planner = factory.get(AgentVariant.PLANNER)
        factory.clear_cache()

        assert factory.get(AgentVariant.PLANNER) is not planner

    def test_missing_config(self, tmp_path, checkpoint_store):
        """Test a missing configuration raises AgentError."""
        factory = AgentFactory(
            llm_client=None,
            checkpoint_store=checkpoint_store,
            orchestration=OrchestrationSettings(),
            agents_dir=tmp_path,
        )

        with pytest.raises(AgentError):
            factory.get(AgentVariant.TEACHER)
