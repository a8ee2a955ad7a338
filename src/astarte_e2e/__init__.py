"""
Astarte E2E

End-to-end validation driver for the Astarte device SDK.
"""

# Copyright © 2025 Sierra Labs LLC
# SPDX-License-Identifier: AGPL-3.0-only

__version__ = "0.1.0"

__all__ = ["__version__"]
