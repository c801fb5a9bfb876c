"""Shared pytest fixtures for deal-logic tests."""

import pytest

from deal_logic.core.ir import FieldCatalog, TargetCatalog


@pytest.fixture
def field_records() -> list[dict]:
    """Raw deal inputs as the host serves them."""
    return [
        {"id": "f_loan_amount", "input_label": "Loan Amount", "input_type": "currency"},
        {"id": "f_rate", "input_label": "Interest Rate", "input_type": "percentage"},
        {"id": "f_borrower", "input_label": "Borrower Name", "input_type": "text"},
        {
            "id": "f_property",
            "input_label": "Property Type",
            "input_type": "dropdown",
            "dropdown_options": ["Single Family", "Condo"],
        },
        {"id": "f_close_date", "input_label": "Closing Date", "input_type": "date"},
        {"id": "f_is_refi", "input_label": "Refinance", "input_type": "boolean"},
    ]


@pytest.fixture
def catalog(field_records: list[dict]) -> FieldCatalog:
    return FieldCatalog.from_records(field_records)


@pytest.fixture
def targets() -> TargetCatalog:
    return TargetCatalog({1: "Appraisal", 2: "Title Report"})
