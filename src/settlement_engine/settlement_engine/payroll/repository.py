from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import Branch, LeaveApplication, ManualSalaryAdjustment, PayrollRecord, StaffProfile


class PayrollRepository(Protocol):
    def get_branch(self, branch_id: str) -> Optional[Branch]:
        raise NotImplementedError

    def get_staff(self, staff_id: str) -> Optional[StaffProfile]:
        raise NotImplementedError

    def list_staff(self, branch_id: str) -> Sequence[StaffProfile]:
        raise NotImplementedError

    def list_leaves(self, applicant_id: str) -> Sequence[LeaveApplication]:
        """Every leave application of the applicant, whatever its status."""

        raise NotImplementedError

    def list_manual_adjustments(self, *, staff_id: str, month: str) -> Sequence[ManualSalaryAdjustment]:
        raise NotImplementedError

    def add_manual_adjustment(self, adjustment: ManualSalaryAdjustment) -> None:
        raise NotImplementedError

    def get_record(self, *, staff_id: str, month: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def get_record_by_id(self, record_id: str) -> Optional[PayrollRecord]:
        raise NotImplementedError

    def list_records(self, *, branch_id: str, month: str) -> Sequence[PayrollRecord]:
        raise NotImplementedError

    def save_record(self, record: PayrollRecord) -> bool:
        """Insert or overwrite the (staff_id, month) record unless the stored one is Paid.

        Returns False when a Paid record blocked the write.
        """

        raise NotImplementedError

    def mark_paid(self, *, record_id: str, paid_at: datetime, paid_by: str) -> bool:
        """Pending -> Paid check-and-set; False if the record was not Pending."""

        raise NotImplementedError
