# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Learning domain.

A learning session starts with a plan (concept map and practice tasks)
created by the planner agent, after which the teacher agent walks the
user through the concepts and marks progress as it goes.
"""

from src.domains.learning.service import LearningService, create_learning_service

__all__ = [
    "LearningService",
    "create_learning_service",
]
