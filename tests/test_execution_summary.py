import uuid
from datetime import timedelta
from itertools import product

import pytest

from conftest import at
from models.receive_plan import (
    PlanContainer,
    PlanContainerStatus,
    PlanStatus,
    ReceivedType,
    ReceivePlan,
)
from services.execution_summary import (
    ExecutionSummary,
    all_containers_waiting,
    calculate_summary,
    expected_end_time,
    partition_containers,
    reorder_pending_plan_containers,
    should_enable_done,
    should_enable_pending,
    sort_pending_plans_by_recency,
)


def container(status=PlanContainerStatus.WAITING, received_type=ReceivedType.NORMAL, unassigned_at=None):
    return PlanContainer(
        id=uuid.uuid4(),
        status=status,
        received_type=received_type,
        unassigned_at=unassigned_at,
    )


def test_summary_counts_outcomes_and_skips_detached_rows():
    containers = [
        container(),
        container(PlanContainerStatus.RECEIVED),
        container(PlanContainerStatus.RECEIVED, ReceivedType.PROBLEM),
        container(PlanContainerStatus.RECEIVED, ReceivedType.ADJUSTED_DOCUMENT),
        container(PlanContainerStatus.REJECTED),
        container(unassigned_at=at(9)),
    ]

    summary = calculate_summary(containers)

    assert summary == ExecutionSummary(total=5, received=3, rejected=1, waiting=1, problem=1, adjusted=1)
    assert summary.processed == 4


@pytest.mark.parametrize("received,rejected,waiting", list(product(range(3), repeat=3)))
def test_completion_guards_for_all_count_combinations(received, rejected, waiting):
    summary = ExecutionSummary(
        total=received + rejected + waiting,
        received=received,
        rejected=rejected,
        waiting=waiting,
    )

    assert should_enable_done(summary) == (summary.total > 0 and waiting == 0)
    assert should_enable_pending(summary) == (rejected > 0 and waiting > 0)


def test_empty_plan_cannot_be_done():
    assert should_enable_done(ExecutionSummary()) is False


def test_all_containers_waiting():
    assert all_containers_waiting(calculate_summary([container(), container()]))
    assert not all_containers_waiting(calculate_summary([container(), container(PlanContainerStatus.REJECTED)]))


def build_plan(execution_start=None):
    return ReceivePlan(
        id=uuid.uuid4(),
        code="P1",
        status=PlanStatus.IN_PROGRESS,
        planned_start=at(8),
        planned_end=at(12),
        execution_start=execution_start,
    )


def test_expected_end_falls_back_to_planned_end_before_progress():
    started = build_plan(execution_start=at(10))
    not_started = build_plan()

    assert expected_end_time(started, ExecutionSummary(total=4, waiting=4)) == at(12)
    assert expected_end_time(not_started, ExecutionSummary(total=4, received=2, waiting=2)) == at(12)


def test_expected_end_extrapolates_from_processed_fraction():
    plan = build_plan(execution_start=at(10))

    half_done = ExecutionSummary(total=4, received=1, rejected=1, waiting=2)
    all_done = ExecutionSummary(total=4, received=3, rejected=1)

    assert expected_end_time(plan, half_done) == at(18)
    assert expected_end_time(plan, all_done) == at(14)


def test_expected_end_uses_epsilon_floor():
    plan = build_plan(execution_start=at(10))
    barely_started = ExecutionSummary(total=100, received=1, waiting=99)

    assert expected_end_time(plan, barely_started, epsilon=0.05) == at(10) + timedelta(hours=80)


def test_partition_keeps_display_order():
    first = container()
    second = container(PlanContainerStatus.RECEIVED)
    third = container()

    waiting, processed = partition_containers([first, second, third])

    assert waiting == [first, third]
    assert processed == [second]


def test_pending_plans_sorted_by_pending_date_then_execution_end():
    older = build_plan()
    older.status = PlanStatus.PENDING
    older.pending_date = at(9, day=1)
    newer = build_plan()
    newer.status = PlanStatus.PENDING
    newer.pending_date = None
    newer.execution_end = at(9, day=3)
    scheduled = build_plan()
    scheduled.status = PlanStatus.SCHEDULED

    assert sort_pending_plans_by_recency([older, scheduled, newer]) == [newer, older]


def test_rejected_containers_listed_first_for_pending_plans():
    waiting = container()
    rejected = container(PlanContainerStatus.REJECTED)
    received = container(PlanContainerStatus.RECEIVED)

    assert reorder_pending_plan_containers([waiting, rejected, received]) == [rejected, waiting, received]
