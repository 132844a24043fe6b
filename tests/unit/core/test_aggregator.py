"""Tests for request status derivation and level gating."""

from leaveflow.core.approval import (
    ApprovalStatus,
    Decision,
    NodeDecision,
    actionable_nodes_for,
    derive_request_status,
    is_actionable,
)
from leaveflow.core.approval.aggregator import lower_levels_approved

from tests.factories import ALICE, BOB, DAVE, FIXED_NOW, JANE, make_request, make_template


def set_status(request, level, status):
    request.nodes[level - 1].status = status


class TestDeriveRequestStatus:

    def test_all_pending(self, two_level_request):
        assert derive_request_status(two_level_request) == ApprovalStatus.PENDING

    def test_partially_approved_is_pending(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.APPROVED)
        assert derive_request_status(two_level_request) == ApprovalStatus.PENDING

    def test_all_approved(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.APPROVED)
        set_status(two_level_request, 2, ApprovalStatus.APPROVED)
        assert derive_request_status(two_level_request) == ApprovalStatus.APPROVED

    def test_any_rejected(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.APPROVED)
        set_status(two_level_request, 2, ApprovalStatus.REJECTED)
        assert derive_request_status(two_level_request) == ApprovalStatus.REJECTED

    def test_rejection_leaves_other_nodes_untouched(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.REJECTED)

        assert derive_request_status(two_level_request) == ApprovalStatus.REJECTED
        assert two_level_request.nodes[1].status == ApprovalStatus.PENDING

    def test_invariants_over_every_combination(self):
        statuses = list(ApprovalStatus)
        for first in statuses:
            for second in statuses:
                request = make_request()
                set_status(request, 1, first)
                set_status(request, 2, second)
                derived = derive_request_status(request)

                assert (derived == ApprovalStatus.REJECTED) == (ApprovalStatus.REJECTED in (first, second))
                assert (derived == ApprovalStatus.APPROVED) == (first == second == ApprovalStatus.APPROVED)


class TestIsActionable:

    def test_first_level_actionable(self, two_level_request):
        assert is_actionable(two_level_request, two_level_request.nodes[0].id)

    def test_second_level_gated(self, two_level_request):
        assert not is_actionable(two_level_request, two_level_request.nodes[1].id)

    def test_second_level_opens_after_approval(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.APPROVED)

        assert not is_actionable(two_level_request, two_level_request.nodes[0].id)
        assert is_actionable(two_level_request, two_level_request.nodes[1].id)

    def test_unknown_node(self, two_level_request):
        assert not is_actionable(two_level_request, "missing")

    def test_gating_uses_level_not_position(self):
        request = make_request(template=make_template(([JANE], "any"), ([BOB], "any"), ([ALICE], "any")))
        request.nodes.reverse()
        level_3 = request.nodes[0]
        level_1 = request.nodes[2]

        assert is_actionable(request, level_1.id)
        assert not is_actionable(request, level_3.id)

        level_1.status = ApprovalStatus.APPROVED
        assert not lower_levels_approved(request, level_3)

    def test_lower_levels_approved_for_first_level(self, two_level_request):
        assert lower_levels_approved(two_level_request, two_level_request.nodes[0])


class TestActionableNodesFor:

    def test_level_one_approvers(self, two_level_request):
        assert [n.level for n in actionable_nodes_for(two_level_request, JANE.id)] == [1]
        assert [n.level for n in actionable_nodes_for(two_level_request, BOB.id)] == [1]
        assert actionable_nodes_for(two_level_request, ALICE.id) == []

    def test_next_level_after_approval(self, two_level_request):
        set_status(two_level_request, 1, ApprovalStatus.APPROVED)

        assert actionable_nodes_for(two_level_request, JANE.id) == []
        assert [n.level for n in actionable_nodes_for(two_level_request, ALICE.id)] == [2]

    def test_excludes_already_decided_approver(self):
        request = make_request(template=make_template(([JANE, DAVE], "all")))
        node = request.nodes[0]
        node.decisions[JANE.id] = _decision(JANE.id)

        assert actionable_nodes_for(request, JANE.id) == []
        assert actionable_nodes_for(request, DAVE.id) == [node]

    def test_finalized_request_has_nothing_actionable(self, two_level_request):
        two_level_request.status = ApprovalStatus.REJECTED
        assert actionable_nodes_for(two_level_request, JANE.id) == []

    def test_unlisted_approver(self, two_level_request):
        assert actionable_nodes_for(two_level_request, "nobody") == []


def _decision(approver_id):
    return NodeDecision(approver_id=approver_id, decision=Decision.APPROVED, decided_at=FIXED_NOW)
