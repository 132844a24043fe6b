"""Workflow templates per leave request type.

The catalog is configuration, not logic: it maps a request type to the
ordered levels a new request is created with.
"""

from typing import Dict, List, Optional, Tuple

from leaveflow.common.config import LeaveflowConfig, load_typed_config
from leaveflow.common.logger import get_logger

from .errors import InvalidTemplate
from .models import Approver, LevelTemplate
from .states import CombinationRule

logger = get_logger("workflow_catalog")

DEFAULT_WORKFLOW = "default"

# Two team leads (either one) followed by HR
DEFAULT_APPROVERS: Tuple[Approver, ...] = (
    Approver(id="1", name="Jane Smith", role="Team Lead"),
    Approver(id="2", name="Bob Johnson", role="Team Lead"),
    Approver(id="3", name="Alice Brown", role="HR Manager"),
)

DEFAULT_TEMPLATE: Tuple[LevelTemplate, ...] = (
    LevelTemplate(approvers=DEFAULT_APPROVERS[:2], rule=CombinationRule.ANY),
    LevelTemplate(approvers=DEFAULT_APPROVERS[2:], rule=CombinationRule.ALL),
)


class WorkflowCatalog:
    """Resolves the workflow template for a request type.

    Unknown request types fall back to the default workflow.
    """

    def __init__(
        self,
        workflows: Dict[str, Tuple[LevelTemplate, ...]],
        approvers: Optional[Dict[str, Approver]] = None,
        default_workflow: str = DEFAULT_WORKFLOW,
    ):
        if default_workflow not in workflows:
            raise InvalidTemplate(f"Default workflow '{default_workflow}' is not defined")
        self._workflows = dict(workflows)
        self._approvers = dict(approvers or {})
        self.default_workflow = default_workflow

    @classmethod
    def default(cls) -> "WorkflowCatalog":
        """Catalog with the built-in two-level workflow."""
        return cls(
            {DEFAULT_WORKFLOW: DEFAULT_TEMPLATE},
            approvers={a.id: a for a in DEFAULT_APPROVERS},
        )

    @classmethod
    def from_config(cls, config: LeaveflowConfig) -> "WorkflowCatalog":
        """Build a catalog from parsed YAML configuration."""
        approvers = {
            a.id: Approver(id=a.id, name=a.name, role=a.role)
            for a in config.approvers.values()
        }
        workflows = {}
        for name, workflow in config.workflows.items():
            workflows[name] = tuple(
                LevelTemplate(
                    approvers=tuple(approvers[a] for a in level.approvers),
                    rule=CombinationRule(level.rule),
                )
                for level in workflow.levels
            )
        return cls(workflows, approvers=approvers, default_workflow=config.default_workflow)

    @classmethod
    def from_file(cls, path: str) -> "WorkflowCatalog":
        """Load a catalog from a YAML workflow file."""
        catalog = cls.from_config(load_typed_config(path))
        logger.info(f"Loaded {len(catalog.workflow_names)} workflows from {path}")
        return catalog

    @property
    def workflow_names(self) -> List[str]:
        return sorted(self._workflows)

    @property
    def approvers(self) -> List[Approver]:
        return list(self._approvers.values())

    def template_for(self, request_type: str) -> Tuple[LevelTemplate, ...]:
        """Template for a request type, or the default workflow's template."""
        template = self._workflows.get(request_type)
        if template is None:
            template = self._workflows[self.default_workflow]
        return template
