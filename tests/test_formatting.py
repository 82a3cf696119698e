from fineract_rag.rag.formatting import (
    NA,
    client_title,
    entity_id,
    format_client,
    format_loan,
    format_loan_product,
    loan_title,
)


class TestFormatClient:

    def test_full_client(self):
        text = format_client({
            "id": 1,
            "displayName": "Jane Doe",
            "accountNo": "000000001",
            "status": {"value": "Active"},
            "active": True,
            "officeName": "Head Office",
            "dateOfBirth": [1990, 4, 7],
        })

        assert text.startswith("Client Information:\n")
        assert "Name: Jane Doe" in text
        assert "Status: Active" in text
        assert "Active: Yes" in text
        assert "Date of Birth: 1990-04-07" in text

    def test_missing_fields_render_placeholder(self):
        text = format_client({"id": 2})

        assert f"Name: {NA}" in text
        assert f"Email: {NA}" in text
        assert "Status: Unknown" in text
        assert "Active: No" in text

    def test_empty_date_list_renders_placeholder(self):
        assert f"Date of Birth: {NA}" in format_client({"id": 1, "dateOfBirth": []})

    def test_partial_records_share_structure(self):
        sparse = format_client({"id": 3})
        full = format_client({"id": 4, "displayName": "X", "mobileNo": "555", "emailAddress": "x@y"})

        labels = lambda t: [line.split(":")[0] for line in t.splitlines()]
        assert labels(sparse) == labels(full)

    def test_blank_string_is_placeholder(self):
        assert f"External ID: {NA}" in format_client({"id": 5, "externalId": "  "})


class TestFormatLoanProduct:

    def test_ranges(self):
        text = format_loan_product({
            "name": "Starter",
            "principal": {"min": 100, "max": 5000, "default": 1000},
            "annualInterestRate": {"min": 5, "max": 20, "default": 12},
            "repaymentEvery": 1,
            "repaymentFrequencyType": {"value": "Months"},
        })

        assert "Principal Range: 100 - 5000 (Default: 1000)" in text
        assert "Interest Rate Range: 5% - 20% (Default: 12%)" in text
        assert "Repayment Frequency: Every 1 Months" in text

    def test_missing_ranges(self):
        text = format_loan_product({"name": "Bare"})

        assert f"Principal Range: {NA}" in text
        assert f"Repayment Frequency: {NA}" in text


class TestFormatLoan:

    def test_loan(self):
        text = format_loan({
            "accountNo": "L-1",
            "clientName": "Jane Doe",
            "annualInterestRate": 12.5,
            "principal": 1000,
            "currency": {"displaySymbol": "$"},
            "summary": {"totalOverdue": 50},
        })

        assert "Interest Rate: 12.5% per annum" in text
        assert "Principal: $1000" in text
        assert "Overdue Amount: $50" in text
        assert f"Loan Officer: {NA}" in text


def test_titles():
    assert client_title({"displayName": "Jane"}) == "Client: Jane"
    assert client_title({"firstname": "Jo", "lastname": "Bloggs"}) == "Client: Jo Bloggs"
    assert client_title({}) == "Client: Unknown"
    assert loan_title({"accountNo": "L-1"}) == "Loan: L-1 - Unknown Client"


def test_entity_id():
    assert entity_id({"id": 42}) == "42"
    assert entity_id({"id": " "}) is None
    assert entity_id({"id": None}) is None
    assert entity_id({}) is None
    assert entity_id("not an entity") is None
