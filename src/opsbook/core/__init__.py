"""Core utilities and shared components for opsbook."""

# Note: Import context lazily to avoid circular imports
# Use: from opsbook.core.context import OpsbookContext, pass_context
from opsbook.core.exceptions import OpsbookError, ConfigError, RunbookError
from opsbook.core.output import OutputFormatter

__all__ = [
    "OpsbookError",
    "ConfigError",
    "RunbookError",
    "OutputFormatter",
]
