"""Settings validation and task dependency rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Tuple

from .config import EXTENSION_PRESETS, SCOPES, TASKS, LocalizeConfig

EXTENSION_FORMAT = re.compile(r"^\.[A-Za-z0-9]+$")

# Each task requires every task listed for it.
TASK_PREREQUISITES: Dict[str, Tuple[str, ...]] = {
    "extract": (),
    "download": ("extract",),
    "replace": ("extract", "download"),
}


class ConfigurationError(ValueError):
    """Raised when settings are not sane enough to run the pipeline."""

    def __init__(self, errors: List[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class TaskDependencyError(ValueError):
    """Raised when disabling a task another enabled task depends on."""


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str] = field(default_factory=list)


def _check_task(task: str) -> None:
    if task not in TASK_PREREQUISITES:
        raise ValueError(f"Unknown task: {task}")


def enable_task(tasks: Iterable[str], task: str) -> FrozenSet[str]:
    """Enable ``task`` together with everything it depends on."""
    _check_task(task)
    return frozenset(tasks) | {task, *TASK_PREREQUISITES[task]}


def disable_task(tasks: Iterable[str], task: str) -> FrozenSet[str]:
    _check_task(task)
    enabled = frozenset(tasks)
    dependents = [
        other for other in TASKS
        if other in enabled and other != task and task in TASK_PREREQUISITES[other]
    ]
    if dependents:
        raise TaskDependencyError(
            f"Cannot disable {task} while {', '.join(dependents)} is enabled"
        )
    return enabled - {task}


def task_errors(tasks: Iterable[str]) -> List[str]:
    enabled = frozenset(tasks)
    errors: List[str] = []
    if not enabled:
        return ["At least one task must be selected."]
    unknown = sorted(enabled - set(TASKS))
    if unknown:
        errors.append(f"Unknown task(s): {', '.join(unknown)}.")
    for task in TASKS:
        if task not in enabled:
            continue
        missing = [req for req in TASK_PREREQUISITES[task] if req not in enabled]
        if missing:
            errors.append(f"Task {task} requires {', '.join(missing)}.")
    return errors


def validate_settings(config: LocalizeConfig) -> ValidationResult:
    """Collect every problem that should stop a run before it starts."""
    errors = task_errors(config.tasks)

    unknown_presets = [name for name in config.preset_extensions if name not in EXTENSION_PRESETS]
    if unknown_presets:
        errors.append(f"Unknown extension preset(s): {', '.join(unknown_presets)}.")

    extensions = config.active_extensions()
    if not extensions:
        errors.append("At least one file extension must be selected or added.")

    invalid = sorted(ext for ext in extensions if not EXTENSION_FORMAT.match(ext))
    if invalid:
        errors.append(
            f"Invalid extension format: {', '.join(invalid)}. "
            "Extensions must start with a dot and contain only letters and digits."
        )

    if config.scope not in SCOPES:
        errors.append(f"Invalid scope: {config.scope}.")

    if not config.store_path or not config.store_path.strip():
        errors.append("Storage path is required.")

    return ValidationResult(is_valid=not errors, errors=errors)


def require_valid(config: LocalizeConfig) -> None:
    result = validate_settings(config)
    if not result.is_valid:
        raise ConfigurationError(result.errors)
