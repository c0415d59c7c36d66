"""
Anthropic boundary modules.

Exports: ClaudeExtractionClient, StepOutput
"""

from .extraction_client import ClaudeExtractionClient, StepOutput

__all__ = ["ClaudeExtractionClient", "StepOutput"]
