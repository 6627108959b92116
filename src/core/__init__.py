# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for MentorMind.

This package contains the conversation orchestration core:
- config: Application configuration and settings
- intelligence: LLM client
- tools: Tool base classes and registry
- agents: Agent variants, runtime, output guard and fallbacks
- orchestration: Router state machines, context assembly and checkpointing
"""
