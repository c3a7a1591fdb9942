from datetime import datetime, timezone
from decimal import Decimal

import pytest

from hr_loans.core.exceptions import RenderFailure
from hr_loans.services.contract_service import ContractData, PdfContractRenderer, monthly_installment


def make_contract(**overrides):
    fields = dict(
        loan_id="65f1c2a9e4b0a1b2c3d4e5f6",
        contract_number=7,
        employee_name="Abebe Kebede",
        approved_amount=Decimal("90000"),
        term_months=36,
        approved_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
        department="Finance",
        job_level="Senior Accountant",
        phone_number="+251911000000",
        guarantor_name="Almaz Tadesse",
        guarantor_phone="+251922000000",
    )
    fields.update(overrides)
    return ContractData(**fields)


@pytest.mark.parametrize("amount, expected", [
    ("90000", "2500.00"),
    ("1000", "27.78"),
    ("100", "2.78"),
    ("0.18", "0.01"),
])
def test_monthly_installment_rounds_half_up(amount, expected):
    assert monthly_installment(Decimal(amount), 36) == Decimal(expected)


def test_render_writes_pdf(tmp_path):
    renderer = PdfContractRenderer(str(tmp_path / "contracts"))
    contract = make_contract()

    path = renderer.render(contract)

    lines = [text for text, _, _ in renderer._lines(contract)]
    assert "Guarantor" in lines
    assert any(line.startswith("Guarantor signature") for line in lines)
    assert path.endswith("loan_contract_7_65f1c2a9e4b0a1b2c3d4e5f6.pdf")
    with open(path, "rb") as f:
        assert f.read(5) == b"%PDF-"


def test_render_without_optional_details(tmp_path):
    renderer = PdfContractRenderer(str(tmp_path))
    contract = make_contract(department=None, job_level=None, phone_number=None, guarantor_name=None, guarantor_phone=None)

    lines = [text for text, _, _ in renderer._lines(contract)]
    assert not any(line.startswith("Guarantor") for line in lines)
    assert "Monthly installment: 2,500.00" in lines
    assert renderer.render(contract)


def test_render_failure_is_wrapped(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("occupied")
    renderer = PdfContractRenderer(str(blocker))

    with pytest.raises(RenderFailure):
        renderer.render(make_contract())
