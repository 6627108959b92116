"""MentorMind Backend.

Multi-agent tutoring and CBT-style therapy companion: routes every user
message to the right specialised agent, lets agents update learning and
therapy progress through tool calls, and degrades to templated replies
whenever the model is unavailable.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
