"""
Document extraction domain logic.

Prompt catalog, structured-result assembly and validation of
extracted payloads. The LLM call itself lives in the boundary layer.
"""

from backend.core.extraction.prompts import IDENTIFICATION_PROMPT, PromptStep, get_steps
from backend.core.extraction.result_builder import (
    build_structured_result,
    final_extracted_data,
    parse_step_json,
    strip_code_fences,
)
from backend.core.extraction.validators import unwrap_structured, validate_extracted

__all__ = [
    "IDENTIFICATION_PROMPT",
    "PromptStep",
    "build_structured_result",
    "final_extracted_data",
    "parse_step_json",
    "get_steps",
    "strip_code_fences",
    "unwrap_structured",
    "validate_extracted",
]
