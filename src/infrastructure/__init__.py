# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for external service integrations.

This package contains:
- database: Domain store connections and models (PostgreSQL / SQLite)
- rate_limit: Per-user fixed-window counters (in-process or Redis)
"""
