"""Workflow configuration for leaveflow.

Handles loading and validation of the YAML file that declares the approver
directory and the approval chain used for each leave request type.

Example::

    approvers:
      - {id: "1", name: Jane Smith, role: Team Lead}
      - {id: "3", name: Alice Brown, role: HR Manager}
    workflows:
      default:
        levels:
          - {approvers: ["1"], rule: any}
          - {approvers: ["3"], rule: all}
    default_workflow: default
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

VALID_RULES = ("any", "all")


@dataclass
class ApproverConfig:
    """One entry of the approver directory."""

    id: str
    name: str
    role: str = ""


@dataclass
class LevelConfig:
    """One approval level: who may act and how their votes combine."""

    approvers: List[str] = field(default_factory=list)
    rule: str = "any"


@dataclass
class WorkflowConfig:
    """Ordered approval levels for one request type."""

    name: str
    levels: List[LevelConfig] = field(default_factory=list)


@dataclass
class LeaveflowConfig:
    """Top-level workflow configuration."""

    approvers: Dict[str, ApproverConfig] = field(default_factory=dict)
    workflows: Dict[str, WorkflowConfig] = field(default_factory=dict)
    default_workflow: str = "default"


def parse_approver_config(approver_dict: Dict[str, Any]) -> ApproverConfig:
    """Parse an approver directory entry.

    Raises:
        ValueError: If the entry has no id or name
    """
    approver_id = approver_dict.get("id")
    name = approver_dict.get("name")
    if approver_id is None or not name:
        raise ValueError(f"Approver entry needs 'id' and 'name': {approver_dict!r}")

    return ApproverConfig(
        id=str(approver_id),
        name=name,
        role=approver_dict.get("role", ""),
    )


def parse_level_config(level_dict: Dict[str, Any]) -> LevelConfig:
    """Parse one level of a workflow.

    Raises:
        ValueError: If the combination rule is unknown
    """
    rule = str(level_dict.get("rule", "any")).lower()
    if rule not in VALID_RULES:
        raise ValueError(f"Invalid rule '{rule}'. Must be one of: {', '.join(VALID_RULES)}")

    return LevelConfig(
        approvers=[str(a) for a in level_dict.get("approvers", [])],
        rule=rule,
    )


def parse_workflow_config(name: str, workflow_dict: Dict[str, Any]) -> WorkflowConfig:
    """Parse a named workflow."""
    return WorkflowConfig(
        name=name,
        levels=[parse_level_config(level) for level in workflow_dict.get("levels", [])],
    )


def parse_config(config_dict: Dict[str, Any]) -> LeaveflowConfig:
    """Parse the full configuration dictionary.

    Every approver referenced by a workflow level must be declared in the
    approver directory.

    Raises:
        ValueError: On unknown approver references or a missing default workflow
    """
    approvers = {}
    for approver_dict in config_dict.get("approvers", []):
        approver = parse_approver_config(approver_dict)
        approvers[approver.id] = approver

    workflows = {}
    for name, workflow_dict in config_dict.get("workflows", {}).items():
        workflow = parse_workflow_config(name, workflow_dict or {})
        for level in workflow.levels:
            unknown = [a for a in level.approvers if a not in approvers]
            if unknown:
                raise ValueError(
                    f"Workflow '{name}' references undeclared approvers: {', '.join(unknown)}"
                )
        workflows[name] = workflow

    default_workflow = config_dict.get("default_workflow", "default")
    if workflows and default_workflow not in workflows:
        raise ValueError(f"Default workflow '{default_workflow}' is not defined")

    return LeaveflowConfig(
        approvers=approvers,
        workflows=workflows,
        default_workflow=default_workflow,
    )


def load_config(config_path: str) -> Dict[str, Any]:
    """Read a workflow YAML file into a plain dictionary.

    ``$VAR`` and ``${VAR}`` references in string values are replaced from
    the environment; unknown variables are left as written.

    Raises:
        FileNotFoundError: If the file does not exist
        TypeError: If the document root is not a mapping
        yaml.YAMLError: If the file is not valid YAML
    """
    path = Path(config_path)
    if not path.is_file():
        raise FileNotFoundError(f"Workflow configuration not found: {config_path}")

    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise TypeError(f"Workflow configuration must be a mapping, not {type(data).__name__}")

    return _expand_env_vars(data)


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand_env_vars(v) for v in value]
    return value


def load_typed_config(config_path: str) -> LeaveflowConfig:
    """Load and parse a workflow file into typed dataclasses."""
    return parse_config(load_config(config_path))
