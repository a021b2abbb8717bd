#!/usr/bin/env python3
"""
Tests for EligibilityService: leave, evaluator, tenure and change cool-downs.
"""

from datetime import timedelta

import pytest

from ldgrowth.enums import BaseDateSource, ChangeType, SkipReason
from ldgrowth.models.employee_model import LeaveStatus
from ldgrowth.models.scheduling_model import LastEvaluationInfo
from ldgrowth.models.settings_model import SchedulingSettings
from ldgrowth.services.scheduling.eligibility_service import EligibilityService


@pytest.fixture
def eligibility():
    return EligibilityService()


@pytest.fixture
def completed_anchor(now):
    return LastEvaluationInfo(
        date=now - timedelta(days=100),
        source=BaseDateSource.COMPLETED_EVALUATION,
        evaluation_id=400,
    )


def hire_anchor(employee):
    return LastEvaluationInfo(date=employee.start_date, source=BaseDateSource.HIRE_DATE)


@pytest.mark.unit
class TestLeave:
    def test_open_ended_leave_is_on_leave(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(
            leave=LeaveStatus(is_on_leave=True, start_date=now - timedelta(days=20))
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert not result.eligible
        assert result.reason == SkipReason.ON_LEAVE.value
        assert "no end date" in result.detail

    def test_leave_ending_in_future_is_on_leave(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(
            leave=LeaveStatus(is_on_leave=True, end_date=now + timedelta(days=3))
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.ON_LEAVE.value

    def test_recent_return_is_in_grace_period(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(
            leave=LeaveStatus(is_on_leave=True, end_date=now - timedelta(days=5))
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.LEAVE_GRACE_PERIOD.value

    def test_return_beyond_grace_period_is_eligible(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(
            leave=LeaveStatus(is_on_leave=False, end_date=now - timedelta(days=14))
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.eligible


@pytest.mark.unit
class TestEvaluator:
    def test_no_evaluator(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(with_evaluator=False)

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.NO_EVALUATOR.value

    def test_evaluator_on_leave(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(evaluator=factory.evaluator(on_leave=True))

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.EVALUATOR_ON_LEAVE.value

    def test_employee_leave_is_checked_before_evaluator(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(
            with_evaluator=False, leave=LeaveStatus(is_on_leave=True)
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.ON_LEAVE.value


@pytest.mark.unit
class TestMinimumEmployment:
    def test_new_hire_waits(self, eligibility, factory, scheduling_settings, now):
        employee = factory.employee(hired_days_ago=30)

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, hire_anchor(employee), now
        )

        assert result.reason == SkipReason.MINIMUM_EMPLOYMENT.value
        assert "30 of 90" in result.detail

    def test_store_minimum_is_honoured(self, eligibility, factory, now):
        employee = factory.employee(hired_days_ago=30)

        result = eligibility.is_employee_eligible(
            employee,
            SchedulingSettings(min_employment_days=21),
            hire_anchor(employee),
            now,
        )

        assert result.eligible

    def test_tenure_does_not_apply_after_first_evaluation(
        self, eligibility, factory, scheduling_settings, now
    ):
        employee = factory.employee(hired_days_ago=30)
        anchor = LastEvaluationInfo(
            date=now - timedelta(days=10),
            source=BaseDateSource.COMPLETED_EVALUATION,
        )

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, anchor, now
        )

        assert result.eligible


@pytest.mark.unit
class TestEmployeeChanges:
    def test_recent_role_change_is_in_cooldown(
        self, eligibility, factory, scheduling_settings, completed_anchor, now
    ):
        employee = factory.employee(role_changes=[now - timedelta(days=10)])

        result = eligibility.is_employee_eligible(
            employee, scheduling_settings, completed_anchor, now
        )

        assert result.reason == SkipReason.CHANGE_COOLDOWN.value

    def test_transfer_past_wait_requires_evaluation(
        self, eligibility, factory, completed_anchor, now
    ):
        employee = factory.employee(transfers=[now - timedelta(days=50)])

        change = eligibility.handle_employee_changes(employee, completed_anchor, now)

        assert change.change_type == ChangeType.TRANSFER
        assert change.wait_days == 45
        assert change.requires_evaluation
        assert not change.in_cooldown

    def test_transfer_wait_is_longer_than_role_change(
        self, eligibility, factory, completed_anchor, now
    ):
        employee = factory.employee(transfers=[now - timedelta(days=40)])

        change = eligibility.handle_employee_changes(employee, completed_anchor, now)

        assert change.in_cooldown

    def test_changes_before_anchor_are_ignored(
        self, eligibility, factory, completed_anchor, now
    ):
        employee = factory.employee(role_changes=[now - timedelta(days=200)])

        change = eligibility.handle_employee_changes(employee, completed_anchor, now)

        assert not change.has_change

    def test_most_recent_change_wins(self, eligibility, factory, completed_anchor, now):
        employee = factory.employee(
            role_changes=[now - timedelta(days=5)],
            transfers=[now - timedelta(days=60)],
        )

        change = eligibility.handle_employee_changes(employee, completed_anchor, now)

        assert change.change_type == ChangeType.ROLE_CHANGE
        assert change.days_since_change == 5

    def test_tie_prefers_transfer(self, eligibility, factory, completed_anchor, now):
        changed_at = now - timedelta(days=35)
        employee = factory.employee(role_changes=[changed_at], transfers=[changed_at])

        change = eligibility.handle_employee_changes(employee, completed_anchor, now)

        assert change.change_type == ChangeType.TRANSFER
        assert change.in_cooldown
