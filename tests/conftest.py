"""
Pytest configuration and fixtures for the utilization overview tests.
"""
import os
import sys
from decimal import Decimal

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from utilization_core import UtilizationRecord


def make_record(
    account: str,
    auth: str = "1",
    authorized="1000",
    used="0",
    overage="0",
    currency: str = "MAD",
    **extra,
) -> UtilizationRecord:
    """
    Build a UtilizationRecord with Decimal amounts.

    Amounts are passed through str() so tests can use ints freely.
    """
    return UtilizationRecord(
        account_number=account,
        authorization_number=auth,
        authorized_amount=Decimal(str(authorized)),
        used_amount=Decimal(str(used)),
        overage_amount=Decimal(str(overage)),
        currency_code=currency,
        **extra,
    )


@pytest.fixture
def scenario_records():
    """
    The two-line reference scenario:
    A1 is 20% over its authorization, A2 is within its limit.
    """
    return (
        make_record("A1", "1", authorized=1000, used=1200, overage=200),
        make_record("A2", "1", authorized=500, used=400, overage=0),
    )


@pytest.fixture
def portfolio_records():
    """Five lines with ties on both sort keys and one zero authorization."""
    return (
        make_record("P1", "1", authorized=1000, used=1050, overage=50),
        make_record("P2", "1", authorized=5000, used=4000, overage=0),
        make_record("P3", "1", authorized=1000, used=1300, overage=300),
        make_record("P4", "1", authorized=5000, used=5300, overage=300),
        make_record("P5", "1", authorized=0, used=250, overage=250),
    )


@pytest.fixture
def scenario_payload():
    """API-shaped payload for the reference scenario (camelCase keys)."""
    return {
        "asOf": "2024-05-31T18:00:00Z",
        "records": [
            {"accountNumber": "A1", "authorizationNumber": "1", "authorizedAmount": 1000,
             "usedAmount": 1200, "overageAmount": 200, "currencyCode": "MAD"},
            {"accountNumber": "A2", "authorizationNumber": "1", "authorizedAmount": 500,
             "usedAmount": 400, "overageAmount": 0, "currencyCode": "MAD"},
        ],
    }
