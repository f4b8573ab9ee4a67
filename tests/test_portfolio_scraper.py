"""
PortfolioScraper tests
"""

import pytest

from startup_tracker.config import InvestmentWindow, PortfolioSourceConfig
from startup_tracker.scrapers.exceptions import HTTPStatusError, NetworkError
from startup_tracker.scrapers.portfolio import InvestmentWindowFilter, PortfolioScraper
from startup_tracker.scrapers.records import NOT_FOUND

SELECTORS = [".company-grid-item", "[data-filter-by]", ".builder", ".startup-item"]


def make_scraper(fake_http, linkedin, **overrides):
    config = PortfolioSourceConfig(urls=["https://portfolio.test/"], selectors=SELECTORS, **overrides)
    return PortfolioScraper(config, fake_http, linkedin)


class TestPortfolioScraper:

    @pytest.mark.asyncio
    async def test_third_selector_wins_and_later_ones_are_ignored(self, fake_http, linkedin):
        builders = "".join(
            f'<div class="builder"><div class="builder-title"><span>Company {i}</span></div></div>'
            for i in range(5)
        )
        fake_http.fetch_text.return_value = f"""
            <html><body>
              {builders}
              <div class="startup-item"><h3>Never Seen</h3></div>
            </body></html>
        """
        scraper = make_scraper(fake_http, linkedin)

        startups = await scraper.run()

        assert [s.name for s in startups] == [f"Company {i}" for i in range(5)]
        assert all(s.source == "portfolio" for s in startups)
        fake_http.fetch_text.assert_awaited_once_with("https://portfolio.test/")

    @pytest.mark.asyncio
    async def test_dedup_validation_and_fields(self, fake_http, linkedin):
        fake_http.fetch_text.return_value = """
            <div class="company-grid-item" data-name="Acme"><a href="https://acme.io">site</a></div>
            <div class="company-grid-item" data-name="ACME"></div>
            <div class="company-grid-item" data-name="X"></div>
            <div class="company-grid-item"><h3>IPO: Beta Labs</h3></div>
            <div class="company-grid-item"></div>
        """
        scraper = make_scraper(fake_http, linkedin)

        startups = await scraper.run()

        assert [s.name for s in startups] == ["Acme", "Beta Labs"]
        acme, beta = startups
        assert acme.website == "https://acme.io"
        assert acme.linkedin_url == "https://www.linkedin.com/company/acme"
        assert beta.website == NOT_FOUND
        assert beta.linkedin_url == "https://www.linkedin.com/company/beta-labs"
        assert scraper.get_stats()["items_skipped"] == 3

    @pytest.mark.asyncio
    async def test_acquirer_only_title_is_skipped(self, fake_http, linkedin):
        fake_http.fetch_text.return_value = """
            <div class="builder"><h3>Acquired By: Meta</h3></div>
            <div class="builder"><h3>Oculus Acquired By: Meta</h3></div>
        """
        scraper = make_scraper(fake_http, linkedin)

        startups = await scraper.run()

        assert [s.name for s in startups] == ["Oculus"]
        assert scraper.get_stats()["items_skipped"] == 1

    @pytest.mark.asyncio
    async def test_no_selector_matches(self, fake_http, linkedin):
        fake_http.fetch_text.return_value = "<p>redesigned page</p>"
        assert await make_scraper(fake_http, linkedin).run() == []

    @pytest.mark.asyncio
    async def test_falls_through_to_next_url(self, fake_http, linkedin):
        fake_http.fetch_text.side_effect = [
            HTTPStatusError("404", status_code=404),
            '<div class="builder"><h3>Gamma</h3></div>',
        ]
        config = PortfolioSourceConfig(urls=["https://old.test/", "https://new.test/"], selectors=SELECTORS)
        scraper = PortfolioScraper(config, fake_http, linkedin)

        startups = await scraper.run()

        assert [s.name for s in startups] == ["Gamma"]
        assert fake_http.fetch_text.await_count == 2

    @pytest.mark.asyncio
    async def test_all_urls_failing_aborts_the_source(self, fake_http, linkedin):
        fake_http.fetch_text.side_effect = NetworkError("down")
        scraper = make_scraper(fake_http, linkedin)

        with pytest.raises(NetworkError):
            await scraper.run()

    @pytest.mark.asyncio
    async def test_item_error_is_skipped(self, fake_http, linkedin, monkeypatch):
        fake_http.fetch_text.return_value = """
            <div class="builder" data-name="Broken"></div>
            <div class="builder" data-name="Fine"></div>
        """
        scraper = make_scraper(fake_http, linkedin)
        original = scraper.build_candidate

        async def flaky(name, website=None):
            if name == "Broken":
                raise RuntimeError("lookup exploded")
            return await original(name, website)

        monkeypatch.setattr(scraper, "build_candidate", flaky)

        startups = await scraper.run()

        assert [s.name for s in startups] == ["Fine"]
        assert scraper.get_stats()["errors"] == 1

    @pytest.mark.asyncio
    async def test_investment_window_and_exit_filters(self, fake_http, linkedin):
        fake_http.fetch_text.return_value = """
            <div data-filter-by="2024 seed" data-investment-date="Q4 2024" data-name="Quarter Co"></div>
            <div data-filter-by="2024" data-investment-date="November 2024" data-name="Month Co"></div>
            <div data-filter-by="2024" data-investment-date="2024-12-03" data-name="Iso Co"></div>
            <div data-filter-by="2024" data-investment-date="2024-05-01" data-name="Spring Co"></div>
            <div data-filter-by="2023" data-investment-date="Q4 2024" data-name="Wrong Year Co"></div>
            <div data-filter-by="2024 exit" data-investment-date="Q4 2024" data-name="Exit Co"></div>
        """
        scraper = make_scraper(
            fake_http,
            linkedin,
            investment_window=InvestmentWindow(year=2024, quarter=4),
            exclude_exits=True,
        )

        startups = await scraper.run()

        assert [s.name for s in startups] == ["Quarter Co", "Month Co", "Iso Co"]


class TestInvestmentWindowFilter:

    def test_months_for_quarter(self):
        assert InvestmentWindowFilter(2024, 1).months == [1, 2, 3]
        assert InvestmentWindowFilter(2024, 4).months == [10, 11, 12]

    def test_accepts(self):
        window = InvestmentWindowFilter(2024, 4)
        assert window.accepts("2024", "October 2024")
        assert not window.accepts("2024", "September 2024")
        assert not window.accepts("", "Q4 2024")
