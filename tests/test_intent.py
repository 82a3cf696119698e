import pytest

from fineract_rag.rag.intent import LiveFetchDirective as D, classify


@pytest.mark.parametrize(
    "query, expected",
    [
        ("show me overdue loans", {D.OVERDUE_LOANS}),
        ("hello", set()),
        ("list our loans", {D.LOANS}),
        ("which loan products do we offer?", {D.LOAN_PRODUCTS}),
        ("customers that are late on payment", {D.OVERDUE_LOANS}),
        ("find client John", {D.CLIENTS}),
        ("what interest rate applies?", {D.LOAN_PRODUCTS}),
        ("portfolio summary please", {D.PORTFOLIO_SUMMARY}),
    ],
)
def test_classify(query, expected):
    assert classify(query) == frozenset(expected)


def test_case_insensitive():
    assert classify("SHOW ME OVERDUE LOANS") == classify("show me overdue loans")


def test_multiple_directives_fire_independently():
    directives = classify("client loans and the portfolio report")

    assert directives == {D.CLIENTS, D.LOANS, D.PORTFOLIO_SUMMARY}
