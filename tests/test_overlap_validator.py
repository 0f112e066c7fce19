import uuid
from itertools import product

import pytest

from conftest import at
from core.exceptions import InvalidRangeError, OverlapError
from models.order_container import OrderContainer
from models.receive_plan import PlanStatus, ReceivePlan
from services.overlap_validator import (
    deadline_warnings,
    ensure_no_overlap,
    find_overlap,
    windows_overlap,
)


def build_plan(code, start, end, status=PlanStatus.SCHEDULED, execution_start=None):
    return ReceivePlan(
        id=uuid.uuid4(),
        code=code,
        status=status,
        planned_start=start,
        planned_end=end,
        execution_start=execution_start,
    )


def test_overlapping_window_references_conflicting_plan():
    p1 = build_plan("P1", at(9), at(17))

    error = find_overlap(at(16), at(18), [p1])

    assert isinstance(error, OverlapError)
    assert error.plan_code == "P1"
    assert error.plan_id == p1.id
    assert error.window_start == at(9)
    assert error.window_end == at(17)


def test_touching_windows_do_not_conflict():
    p1 = build_plan("P1", at(9), at(17))

    assert find_overlap(at(17), at(18), [p1]) is None
    assert find_overlap(at(7), at(9), [p1]) is None


HOURS = [8, 9, 10, 12]
WINDOWS = [(s, e) for s, e in product(HOURS, HOURS) if s < e]


@pytest.mark.parametrize("first,second", list(product(WINDOWS, WINDOWS)))
def test_overlap_is_symmetric(first, second):
    a = build_plan("A", at(first[0]), at(first[1]))
    b = build_plan("B", at(second[0]), at(second[1]))

    a_against_b = find_overlap(a.planned_start, a.planned_end, [b]) is not None
    b_against_a = find_overlap(b.planned_start, b.planned_end, [a]) is not None

    assert a_against_b == b_against_a
    assert a_against_b == windows_overlap(at(first[0]), at(first[1]), at(second[0]), at(second[1]))


def test_invalid_range_is_reported_before_overlap():
    p1 = build_plan("P1", at(9), at(17))

    assert isinstance(find_overlap(at(12), at(12), [p1]), InvalidRangeError)
    assert isinstance(find_overlap(at(12), at(10), [p1]), InvalidRangeError)


def test_done_plans_never_conflict():
    done = build_plan("OLD", at(9), at(17), status=PlanStatus.DONE)

    assert find_overlap(at(10), at(11), [done]) is None


def test_pending_plans_still_conflict():
    pending = build_plan("PEND", at(9), at(17), status=PlanStatus.PENDING)

    assert isinstance(find_overlap(at(10), at(11), [pending]), OverlapError)


def test_plan_being_edited_is_excluded():
    p1 = build_plan("P1", at(9), at(17))

    assert find_overlap(at(10), at(18), [p1], exclude_plan_id=p1.id) is None


def test_in_progress_plan_keeps_its_planned_window():
    late = build_plan("LATE", at(8), at(10), status=PlanStatus.IN_PROGRESS, execution_start=at(11))
    early = build_plan("EARLY", at(14), at(16), status=PlanStatus.IN_PROGRESS, execution_start=at(6))

    error = find_overlap(at(9), at(10), [late])
    assert isinstance(error, OverlapError)
    assert error.window_start == at(8)
    assert find_overlap(at(11), at(13), [late]) is None
    assert isinstance(find_overlap(at(14), at(15), [early]), OverlapError)
    assert find_overlap(at(6), at(8), [early]) is None


def test_ensure_no_overlap_raises():
    p1 = build_plan("P1", at(9), at(17))

    with pytest.raises(OverlapError):
        ensure_no_overlap(at(16), at(18), [p1])
    ensure_no_overlap(at(17), at(18), [p1])


def test_deadline_warnings_flag_exceeded_deadlines_only():
    tight = OrderContainer(container_no="MSCU1234567", extract_to=at(12), yard_free_to=at(15))
    relaxed = OrderContainer(container_no="MSCU7654321", extract_to=at(20), yard_free_to=None)

    warnings = deadline_warnings(at(16), [tight, relaxed])

    assert len(warnings) == 2
    assert all("MSCU1234567" in warning for warning in warnings)
    assert "Extraction deadline" in warnings[0]
    assert "Free storage deadline" in warnings[1]
