# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Therapy domain.

A therapy session starts with an assessment that sets goals and
exercises. The psychotherapist agent then leads the sessions, handing
over to the cognitive restructuring agent for A-B-C-D-E work.
"""

from src.domains.therapy.service import TherapyService, create_therapy_service

__all__ = [
    "TherapyService",
    "create_therapy_service",
]
