"""Approval node states and the decisions that move them.

State Machine Diagram (one node)::

                 ┌──────────┐
                 │ PENDING  │ ← every node starts here
                 └────┬─────┘
                      │
         ┌────────────┼─────────────────────┐
         │ reject     │ approve (ANY)       │ approve (ALL)
         │            │                     │
    ┌────▼─────┐ ┌────▼─────┐        ┌──────▼──────┐
    │ REJECTED │ │ APPROVED │ ◄──────│ all listed  │── no ──► PENDING
    └──────────┘ └──────────┘  yes   │ approved?   │
                                     └─────────────┘

APPROVED and REJECTED are terminal. A request uses the same three statuses,
derived from its nodes.
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional, Set, Tuple


class ApprovalStatus(str, Enum):
    """Status of a node or of a whole request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(str, Enum):
    """A single approver's action on one node."""

    APPROVED = "approved"
    REJECTED = "rejected"


class CombinationRule(str, Enum):
    """How the approvals of a node's approvers combine."""

    ANY = "any"  # one approval finalizes the node
    ALL = "all"  # every listed approver must approve


class TransitionRule(NamedTuple):
    """Defines a valid node transition."""
    from_state: ApprovalStatus
    decision: Decision
    to_state: ApprovalStatus
    rule: Optional[CombinationRule] = None  # None applies to every rule
    requires_unanimity: bool = False


TRANSITION_RULES: list[TransitionRule] = [
    # Rejection is unconditional
    TransitionRule(ApprovalStatus.PENDING, Decision.REJECTED, ApprovalStatus.REJECTED),

    TransitionRule(ApprovalStatus.PENDING, Decision.APPROVED, ApprovalStatus.APPROVED,
                   CombinationRule.ANY),
    TransitionRule(ApprovalStatus.PENDING, Decision.APPROVED, ApprovalStatus.APPROVED,
                   CombinationRule.ALL, requires_unanimity=True),
]

VALID_TRANSITIONS: Dict[ApprovalStatus, Set[Decision]] = {}
TRANSITION_TARGETS: Dict[Tuple[ApprovalStatus, Decision, Optional[CombinationRule]], TransitionRule] = {}

for _rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(_rule.from_state, set()).add(_rule.decision)
    TRANSITION_TARGETS[(_rule.from_state, _rule.decision, _rule.rule)] = _rule


TERMINAL_STATES: Set[ApprovalStatus] = {
    ApprovalStatus.APPROVED,
    ApprovalStatus.REJECTED,
}


def can_transition(from_state: ApprovalStatus, decision: Decision) -> bool:
    """Check if a decision may be recorded on a node in the given state."""
    return decision in VALID_TRANSITIONS.get(from_state, set())


def get_transition_rule(
    from_state: ApprovalStatus,
    decision: Decision,
    rule: CombinationRule,
) -> Optional[TransitionRule]:
    """Get the transition rule for a state/decision/combination-rule triple.

    Rules declared without a combination rule match every node.
    """
    return (
        TRANSITION_TARGETS.get((from_state, decision, rule))
        or TRANSITION_TARGETS.get((from_state, decision, None))
    )
