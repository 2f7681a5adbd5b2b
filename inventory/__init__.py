"""Inventory data-access package.

Single source of the app name/version so the CLI, API and tests agree.
"""

APP_NAME = "inventory-api"
APP_VERSION = "0.1.0"  # Keep in sync with pyproject version.

__all__ = ["APP_NAME", "APP_VERSION"]
