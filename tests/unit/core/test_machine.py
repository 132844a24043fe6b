"""Tests for the node state machine."""

from datetime import timedelta

import pytest

from leaveflow.core.approval import (
    ApprovalNode,
    ApprovalStatus,
    CombinationRule,
    Decision,
    DuplicateDecision,
    NodeFinalized,
    NodeStateMachine,
    NotEligible,
    is_eligible,
    record_decision,
)

from tests.factories import ALICE, BOB, DAVE, FIXED_NOW, JANE


def make_node(rule=CombinationRule.ANY, approvers=(JANE, BOB)):
    return ApprovalNode(id="node-1", level=1, approvers=tuple(approvers), combination_rule=rule)


class TestEligibility:

    def test_listed_approver_is_eligible(self):
        node = make_node()
        assert is_eligible(node, JANE.id)
        assert is_eligible(node, BOB.id)

    def test_unlisted_approver_is_not_eligible(self):
        assert not is_eligible(make_node(), ALICE.id)

    def test_unlisted_approver_raises(self):
        node = make_node()
        with pytest.raises(NotEligible) as exc_info:
            record_decision(node, ALICE.id, Decision.APPROVED)

        assert exc_info.value.node_id == "node-1"
        assert exc_info.value.approver_id == ALICE.id
        assert node.decisions == {}
        assert node.status == ApprovalStatus.PENDING


class TestAnyNode:

    def test_first_approval_finalizes(self):
        node = make_node(approvers=(JANE, BOB, ALICE))

        status = record_decision(node, BOB.id, Decision.APPROVED, now=FIXED_NOW)

        assert status == ApprovalStatus.APPROVED
        assert node.approved_at == FIXED_NOW
        assert node.approved_by == BOB.id
        assert node.rejected_at is None
        assert set(node.decisions) == {BOB.id}

    def test_rejection_finalizes(self):
        node = make_node()

        status = record_decision(node, JANE.id, Decision.REJECTED, now=FIXED_NOW, comment="Peak season")

        assert status == ApprovalStatus.REJECTED
        assert node.rejected_at == FIXED_NOW
        assert node.rejected_by == JANE.id
        assert node.decisions[JANE.id].comment == "Peak season"

    def test_no_decision_after_approval(self):
        node = make_node()
        record_decision(node, JANE.id, Decision.APPROVED)

        with pytest.raises(NodeFinalized) as exc_info:
            record_decision(node, BOB.id, Decision.REJECTED)

        assert exc_info.value.status == "approved"
        assert node.status == ApprovalStatus.APPROVED
        assert BOB.id not in node.decisions


class TestAllNode:

    def test_partial_approval_stays_pending(self):
        node = make_node(rule=CombinationRule.ALL)

        status = record_decision(node, JANE.id, Decision.APPROVED)

        assert status == ApprovalStatus.PENDING
        assert node.approved_at is None
        assert node.decisions[JANE.id].decision == Decision.APPROVED

    def test_last_approval_finalizes(self):
        node = make_node(rule=CombinationRule.ALL)
        record_decision(node, JANE.id, Decision.APPROVED, now=FIXED_NOW)

        later = FIXED_NOW + timedelta(hours=2)
        status = record_decision(node, BOB.id, Decision.APPROVED, now=later)

        assert status == ApprovalStatus.APPROVED
        assert node.approved_at == later
        assert node.approved_by == BOB.id

    def test_rejection_after_partial_approval(self):
        node = make_node(rule=CombinationRule.ALL)
        record_decision(node, JANE.id, Decision.APPROVED)

        status = record_decision(node, BOB.id, Decision.REJECTED, now=FIXED_NOW)

        assert status == ApprovalStatus.REJECTED
        assert node.rejected_by == BOB.id
        assert node.approved_at is None

    def test_rejection_before_any_approval(self):
        node = make_node(rule=CombinationRule.ALL, approvers=(JANE, BOB, DAVE))

        assert record_decision(node, DAVE.id, Decision.REJECTED) == ApprovalStatus.REJECTED

    def test_three_approvers_need_three_approvals(self):
        node = make_node(rule=CombinationRule.ALL, approvers=(JANE, BOB, DAVE))

        assert record_decision(node, JANE.id, Decision.APPROVED) == ApprovalStatus.PENDING
        assert record_decision(node, DAVE.id, Decision.APPROVED) == ApprovalStatus.PENDING
        assert record_decision(node, BOB.id, Decision.APPROVED) == ApprovalStatus.APPROVED

    def test_single_approver_all_node(self):
        node = make_node(rule=CombinationRule.ALL, approvers=(ALICE,))

        assert record_decision(node, ALICE.id, Decision.APPROVED) == ApprovalStatus.APPROVED


class TestDuplicateDecisions:

    def test_same_approver_twice_raises(self):
        node = make_node(rule=CombinationRule.ALL)
        record_decision(node, JANE.id, Decision.APPROVED)

        with pytest.raises(DuplicateDecision) as exc_info:
            record_decision(node, JANE.id, Decision.APPROVED)

        assert exc_info.value.previous == "approved"

    def test_duplicate_never_overwrites(self):
        node = make_node(rule=CombinationRule.ALL)
        record_decision(node, JANE.id, Decision.APPROVED, now=FIXED_NOW)

        with pytest.raises(DuplicateDecision):
            record_decision(node, JANE.id, Decision.REJECTED)

        assert node.decisions[JANE.id].decision == Decision.APPROVED
        assert node.decisions[JANE.id].decided_at == FIXED_NOW
        assert node.status == ApprovalStatus.PENDING

    def test_finalized_checked_before_duplicate(self):
        node = make_node()
        record_decision(node, JANE.id, Decision.APPROVED)

        with pytest.raises(NodeFinalized):
            record_decision(node, JANE.id, Decision.APPROVED)


class TestNodeStateMachine:

    def test_state_and_terminal(self):
        machine = NodeStateMachine(make_node())
        assert machine.state == ApprovalStatus.PENDING
        assert not machine.is_terminal

        machine.record(JANE.id, Decision.APPROVED)

        assert machine.state == ApprovalStatus.APPROVED
        assert machine.is_terminal

    def test_can_record(self):
        machine = NodeStateMachine(make_node(rule=CombinationRule.ALL))

        assert machine.can_record(JANE.id, Decision.APPROVED)
        assert not machine.can_record(ALICE.id, Decision.APPROVED)

        machine.record(JANE.id, Decision.APPROVED)

        assert not machine.can_record(JANE.id, Decision.REJECTED)
        assert machine.can_record(BOB.id, Decision.REJECTED)

    def test_default_timestamp_is_utc(self):
        node = make_node()
        record_decision(node, JANE.id, Decision.APPROVED)

        assert node.approved_at is not None
        assert node.approved_at.utcoffset() == timedelta(0)
