# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""LangGraph routers, one per session kind."""

from src.core.orchestration.workflows.learning import LearningWorkflow
from src.core.orchestration.workflows.therapy import TherapyWorkflow

__all__ = [
    "LearningWorkflow",
    "TherapyWorkflow",
]
