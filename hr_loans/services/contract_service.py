"""
Salary-advance contract generation.

The approval workflow hands a ``ContractData`` to a ``ContractRenderer`` and
stores the returned path on the loan. Any error while rendering surfaces as
``RenderFailure`` so the approval can be rolled back.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from matplotlib.backends.backend_pdf import PdfPages
from matplotlib.figure import Figure

from hr_loans.core.exceptions import RenderFailure

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def monthly_installment(approved_amount: Decimal, term_months: int) -> Decimal:
    return (Decimal(approved_amount) / Decimal(term_months)).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ContractData:
    loan_id: str
    contract_number: int
    employee_name: str
    approved_amount: Decimal
    term_months: int
    approved_at: datetime
    department: Optional[str] = None
    job_level: Optional[str] = None
    phone_number: Optional[str] = None
    guarantor_name: Optional[str] = None
    guarantor_phone: Optional[str] = None

    @property
    def installment(self) -> Decimal:
        return monthly_installment(self.approved_amount, self.term_months)


class ContractRenderer(ABC):
    @abstractmethod
    def render(self, contract: ContractData) -> str:
        """Produce the contract document and return its path."""


class PdfContractRenderer(ContractRenderer):
    """Renders a single-page A4 contract with matplotlib's PDF backend."""

    A4_INCHES = (8.27, 11.69)

    def __init__(self, output_dir: str):
        self.output_dir = output_dir

    def file_name(self, contract: ContractData) -> str:
        return f"loan_contract_{contract.contract_number}_{contract.loan_id}.pdf"

    def _lines(self, contract: ContractData):
        yield ("Salary Advance Loan Agreement", 16, "bold")
        yield (f"Contract No. {contract.contract_number:05d}", 11, "normal")
        yield (f"Date: {contract.approved_at:%Y-%m-%d}", 11, "normal")
        yield ("", 11, "normal")
        yield ("Borrower", 12, "bold")
        yield (f"Name: {contract.employee_name}", 11, "normal")
        if contract.department:
            yield (f"Department: {contract.department}", 11, "normal")
        if contract.job_level:
            yield (f"Job level: {contract.job_level}", 11, "normal")
        if contract.phone_number:
            yield (f"Phone: {contract.phone_number}", 11, "normal")
        yield ("", 11, "normal")
        yield ("Terms", 12, "bold")
        yield (f"Approved amount: {contract.approved_amount:,.2f}", 11, "normal")
        yield (f"Repayment term: {contract.term_months} months", 11, "normal")
        yield (f"Monthly installment: {contract.installment:,.2f}", 11, "normal")
        yield (
            "The installment is deducted from the borrower's monthly salary until the advance is repaid.",
            10,
            "normal",
        )
        if contract.guarantor_name:
            yield ("", 11, "normal")
            yield ("Guarantor", 12, "bold")
            yield (f"Name: {contract.guarantor_name}", 11, "normal")
            if contract.guarantor_phone:
                yield (f"Phone: {contract.guarantor_phone}", 11, "normal")
        yield ("", 11, "normal")
        yield ("Borrower signature: ______________________", 11, "normal")
        if contract.guarantor_name:
            yield ("Guarantor signature: _____________________", 11, "normal")
        yield ("HR manager signature: ____________________", 11, "normal")

    def render(self, contract: ContractData) -> str:
        path = os.path.join(self.output_dir, self.file_name(contract))
        try:
            os.makedirs(self.output_dir, exist_ok=True)
            figure = Figure(figsize=self.A4_INCHES)
            y = 0.94
            for text, size, weight in self._lines(contract):
                figure.text(0.08, y, text, fontsize=size, fontweight=weight, va="top", wrap=True)
                y -= 0.035 if text else 0.02
            with PdfPages(path) as pdf:
                pdf.savefig(figure)
        except Exception as e:
            logger.error(f"Contract rendering failed for loan {contract.loan_id}: {e}")
            raise RenderFailure(f"Failed to generate contract: {e}") from e

        logger.info(f"Contract generated for loan {contract.loan_id}: {path}")
        return path
