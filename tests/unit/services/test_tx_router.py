"""
Unit tests for TxRouter
"""

from types import SimpleNamespace

import pytest

from src.app.services.tx_router import TxRoute, TxRouter, parse_tx
from src.domain.entities import Transaction


def test_resolves_known_code():
    router = TxRouter.load(
        [
            Transaction(tx_number=53, object_name="Person", method_name="getPersonByName"),
            Transaction(tx_number=10, object_name="Auth", method_name="register"),
        ]
    )

    route = router.resolve(53)

    assert route == TxRoute("Person", "getPersonByName")
    assert route.key == "Person.getPersonByName"
    assert len(router) == 2


@pytest.mark.parametrize("tx", [54, 0, -53, True, 53.0, "53", None, [53]])
def test_unknown_or_malformed_code_resolves_to_none(tx):
    router = TxRouter.load(
        [Transaction(tx_number=53, object_name="Person", method_name="getPersonByName")]
    )

    assert router.resolve(tx) is None


def test_malformed_rows_are_skipped():
    rows = [
        SimpleNamespace(tx_number=0, object_name="Person", method_name="getPerson"),
        SimpleNamespace(tx_number="7", object_name="Person", method_name="getPerson"),
        SimpleNamespace(tx_number=8, object_name="Person", method_name="getPerson"),
    ]

    router = TxRouter.load(rows)

    assert len(router) == 1
    assert router.resolve(8) == TxRoute("Person", "getPerson")


@pytest.mark.parametrize("value, expected", [(1, 1), (53, 53), (0, None), (False, None), (1.5, None)])
def test_parse_tx(value, expected):
    assert parse_tx(value) == expected
