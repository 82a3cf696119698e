from fineract_rag.fineract import CLIENTS, LOANS, FineractError
from fineract_rag.rag.intent import LiveFetchDirective as D
from fineract_rag.rag.live_data import LiveDataFetcher


async def test_fetches_each_directive(mock_fineract):
    mock_fineract.fetch_overdue.return_value = [{"id": 1}]
    mock_fineract.fetch_portfolio_summary.return_value = {"par": 0.05}
    fetcher = LiveDataFetcher(mock_fineract, limit=10)

    data = await fetcher.fetch({D.PORTFOLIO_SUMMARY, D.OVERDUE_LOANS})

    assert data == [{"id": 1}, {"par": 0.05}]


async def test_limit_passed_to_paged_fetch(mock_fineract):
    mock_fineract.fetch_page.return_value = []
    fetcher = LiveDataFetcher(mock_fineract, limit=7)

    await fetcher.fetch({D.CLIENTS, D.LOANS})

    calls = [c.args for c in mock_fineract.fetch_page.await_args_list]
    assert calls == [(CLIENTS, 0, 7), (LOANS, 0, 7)]


async def test_failed_directive_contributes_nothing(mock_fineract):
    mock_fineract.fetch_overdue.side_effect = FineractError("timeout")
    mock_fineract.fetch_page.return_value = [{"id": 5}]
    fetcher = LiveDataFetcher(mock_fineract, limit=10)

    data = await fetcher.fetch({D.OVERDUE_LOANS, D.LOAN_PRODUCTS})

    assert data == [{"id": 5}]


async def test_empty_portfolio_summary_omitted(mock_fineract):
    mock_fineract.fetch_portfolio_summary.return_value = None
    fetcher = LiveDataFetcher(mock_fineract, limit=10)

    assert await fetcher.fetch({D.PORTFOLIO_SUMMARY}) == []
