from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from ..common.clock import Clock, SystemClock
from ..common.datetime_utils import month_bounds
from ..common.ids import new_id
from ..common.validators import require_non_empty, require_non_zero_amount
from ..core.enums import PAYROLL_ROLES, PayrollStatus
from ..core.exceptions import InvalidStateError, NotFoundError, ValidationError
from . import transitions
from .calculator.base import PayrollCalculator
from .calculator.standard_calculator import StandardPayrollCalculator
from .model import ManualSalaryAdjustment, PayrollRecord, PayrollStaffDetails, StaffProfile
from .repository import PayrollRepository

logger = logging.getLogger(__name__)

RecordRef = Union[str, PayrollRecord, PayrollStaffDetails]


@dataclass(frozen=True)
class PayrollTotals:
    branch_id: str
    month: str
    paid_total: int
    pending_total: int
    salary_not_set: int


class PayrollService:
    def __init__(
        self,
        payroll: PayrollRepository,
        *,
        calculator: Optional[PayrollCalculator] = None,
        clock: Optional[Clock] = None,
    ):
        self._payroll = payroll
        self._calculator = calculator or StandardPayrollCalculator()
        self._clock = clock or SystemClock()

    def _payroll_staff(self, branch_id: str) -> list[StaffProfile]:
        branch = self._payroll.get_branch(branch_id)
        if not branch:
            raise NotFoundError(f"Branch {branch_id} not found")
        return [
            s
            for s in self._payroll.list_staff(branch_id)
            if s.role in PAYROLL_ROLES and s.staff_id != branch.principal_id
        ]

    def compute_for_month(self, *, branch_id: str, month: str) -> list[PayrollStaffDetails]:
        month_start, month_end = month_bounds(month)
        out: list[PayrollStaffDetails] = []

        for staff in self._payroll_staff(branch_id):
            existing = self._payroll.get_record(staff_id=staff.staff_id, month=month)
            if existing and existing.status == PayrollStatus.PAID:
                out.append(PayrollStaffDetails(record=existing, staff_name=staff.name, staff_role=staff.role))
                continue

            computation = self._calculator.compute(
                base_salary=staff.base_salary,
                leaves=self._payroll.list_leaves(staff.staff_id),
                adjustments=self._payroll.list_manual_adjustments(staff_id=staff.staff_id, month=month),
                month_start=month_start,
                month_end=month_end,
            )
            record = transitions.recompute(
                existing,
                computation,
                branch_id=branch_id,
                staff_id=staff.staff_id,
                month=month,
            )
            if not self._payroll.save_record(record):
                # Paid by a concurrent run between the read and the write.
                record = self._payroll.get_record(staff_id=staff.staff_id, month=month) or record

            logger.debug(
                f"Payroll {month} staff {staff.staff_id}: status={record.status.value} "
                f"net={record.net_payable} leave_days={record.unpaid_leave_days}"
            )
            out.append(PayrollStaffDetails(record=record, staff_name=staff.name, staff_role=staff.role))

        return out

    @staticmethod
    def _record_id(ref: RecordRef) -> str:
        if isinstance(ref, str):
            return ref
        return ref.record_id

    def process_payroll(self, records: Iterable[RecordRef], processed_by: str) -> list[str]:
        """Pay every Pending record in the batch; anything else is skipped.

        Safe to resubmit: a second run over the same batch pays nothing.
        """
        processed_by = require_non_empty(processed_by, "Processed by")
        paid_at = self._clock.now()
        paid: list[str] = []

        for ref in records:
            record_id = self._record_id(ref)
            record = self._payroll.get_record_by_id(record_id)
            if record is None:
                logger.warning(f"Payroll record {record_id} not found; skipped")
                continue

            try:
                paid_record = transitions.mark_paid(record, paid_at=paid_at, paid_by=processed_by)
            except InvalidStateError as exc:
                logger.info(f"{exc}; skipped")
                continue

            # Stored status may have moved since the read.
            if self._payroll.mark_paid(
                record_id=record_id,
                paid_at=paid_record.paid_at,
                paid_by=paid_record.paid_by,
            ):
                paid.append(record_id)
            else:
                logger.info(f"Payroll record {record_id} was paid concurrently; skipped")

        logger.info(f"Processed payroll by {processed_by}: {len(paid)} paid")
        return paid

    def add_manual_adjustment(
        self,
        *,
        branch_id: str,
        staff_id: str,
        month: str,
        amount: int,
        reason: str,
        adjusted_by: str,
    ) -> ManualSalaryAdjustment:
        month_bounds(month)
        amount = require_non_zero_amount(amount)
        reason = require_non_empty(reason, "Reason")

        staff = self._payroll.get_staff(staff_id)
        if not staff:
            raise NotFoundError(f"Staff {staff_id} not found")
        if staff.branch_id != branch_id:
            raise ValidationError(f"Staff {staff_id} does not belong to branch {branch_id}")

        existing = self._payroll.get_record(staff_id=staff_id, month=month)
        if existing and existing.status == PayrollStatus.PAID:
            raise InvalidStateError(f"Payroll for staff {staff_id} in {month} is already paid")

        adjustment = ManualSalaryAdjustment(
            adjustment_id=new_id("sal-adj"),
            branch_id=branch_id,
            staff_id=staff_id,
            month=month,
            amount=amount,
            reason=reason,
            adjusted_by=adjusted_by,
            adjusted_at=self._clock.now(),
        )
        self._payroll.add_manual_adjustment(adjustment)
        logger.info(f"Salary adjustment {amount} for staff {staff_id} ({month}) by {adjusted_by}")
        return adjustment

    def payroll_totals(self, *, branch_id: str, month: str) -> PayrollTotals:
        month_bounds(month)
        if not self._payroll.get_branch(branch_id):
            raise NotFoundError(f"Branch {branch_id} not found")

        records = self._payroll.list_records(branch_id=branch_id, month=month)
        return PayrollTotals(
            branch_id=branch_id,
            month=month,
            paid_total=sum(r.net_payable or 0 for r in records if r.status == PayrollStatus.PAID),
            pending_total=sum(r.net_payable or 0 for r in records if r.status == PayrollStatus.PENDING),
            salary_not_set=sum(1 for r in records if r.status == PayrollStatus.SALARY_NOT_SET),
        )
