"""Shared fixtures for all tests."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

import shared.config_store as config_mod


@pytest.fixture(autouse=True)
def tmp_config_dir(tmp_path: Path):
    """Point the config store at an empty temporary directory."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    with patch.object(config_mod, "CONFIG_DIR", config_dir):
        yield config_dir


@pytest.fixture()
def tmp_output_dir(tmp_path: Path):
    """Provide a temporary directory for generated PDFs."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    return output_dir


@pytest.fixture()
def personal_info():
    """Valid shared personal information for any bureau dispute."""
    return {
        "firstName": "Maria",
        "middleName": "L",
        "lastName": "Garcia",
        "ssn": "123-45-6789",
        "dob": "1990-05-15",
        "currentAddress": "123 Main St",
        "city": "Los Angeles",
        "state": "CA",
        "zip": "90001",
        "phone": "(555) 010-0100",
        "email": "maria@example.com",
    }


@pytest.fixture()
def equifax_data(personal_info):
    """A complete, valid Equifax eviction dispute."""
    return {
        **personal_info,
        "disputeType": "eviction",
        "courtCase": "2021-CV-12345",
        "landlordName": "Sunrise Property Management",
        "propertyAddress": "456 Oak Ave, Los Angeles, CA",
        "judgmentAmount": "1200",
        "disputeReason": "Case dismissed",
        "disputeExplanation": (
            "The eviction case was dismissed by the court in March 2022 and "
            "should not appear on my file."
        ),
        "courtDismissal": True,
    }


@pytest.fixture()
def profile_data():
    """A well-filled Tenant Advantage Profile."""
    return {
        "fullName": "Jordan Lee",
        "contactPhone": "(555) 222-3333",
        "contactEmail": "jordan@example.com",
        "personalStatement": (
            "I am a nurse who has rented in this city for eight years. I pay on "
            "time, keep a quiet home and I am looking for a long-term place to stay."
        ),
        "housingGoals": "A two-bedroom near the hospital for at least three years.",
        "employmentStatus": "Full-time",
        "employer": "County Hospital",
        "position": "Registered Nurse",
        "monthlyIncome": "3000",
        "yearsEmployed": "6",
        "utilityPaymentHistory": "36 months on-time",
        "phonePaymentHistory": "48 months on-time",
        "insurancePayments": "Auto insurance, never late",
        "desiredRentRange": "$800 - $900",
        "moveInDate": "2026-12-01",
        "leaseTerm": "12 months",
        "reference1Name": "Dana Smith",
        "reference1Relationship": "Former landlord",
        "reference1Phone": "(555) 444-5555",
        "reference1Email": "dana@example.com",
        "onTimePayments": "24",
        "savingsAmount": "2500",
        "debtReduction": "40",
    }
