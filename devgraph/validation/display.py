"""
Validation Report Formatting
"""
from __future__ import annotations

import json
from typing import List

from .models import ValidationErrorCode, ValidationResult


def format_validation_result(result: ValidationResult) -> str:
    if result.ok:
        return "✓ DevGraph validation passed"

    count = len(result.errors)
    lines: List[str] = [f"✗ DevGraph validation failed ({count} error{'' if count == 1 else 's'})", ""]

    for i, error in enumerate(result.errors, start=1):
        lines.append(f"{i}) {ValidationErrorCode(error.code).title}")
        if error.service:
            lines.append(f"   service: {error.service}")
        lines.append(f"   {error.message}")
        if error.location:
            lines.append(f"   file: {error.location}")
        lines.append("")

    return "\n".join(lines).strip()


def format_validation_result_json(result: ValidationResult) -> str:
    return json.dumps(result.to_dict(), indent=2)
