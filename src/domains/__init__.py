# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for MentorMind.

Each domain module exposes the entry points of one session kind.

Domains:
    conversation: Shared chat pipeline and response models.
    learning: Learning sessions (planner and teacher agents).
    therapy: CBT-style therapy sessions (assessment, psychotherapist and
        cognitive restructuring agents).
"""
