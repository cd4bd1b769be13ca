"""
Central data model definitions used across the project.

This module defines the canonical structure of one table row so that:
- all modules share the same field names
- the remote camelCase payload is translated in exactly one place (flatten.py)
- the code stays readable and beginner-friendly
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ModuleRow:
    """
    Represents one class/module pair as shown in the exam module table.

    (class_id, module_id) is the key used for remote writes.
    (class_name, program_name, module_name) is the display identity.
    """

    class_id: Any
    module_id: Any
    class_name: str
    program_name: str
    module_name: str
    start_date: Optional[str]
    end_date: Optional[str]
    survey: bool = False
    exam: bool = False

    @property
    def key(self) -> tuple[Any, Any]:
        return (self.class_id, self.module_id)

    @property
    def display_identity(self) -> tuple[str, str, str]:
        return (self.class_name, self.program_name, self.module_name)
