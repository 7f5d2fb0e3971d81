"""
Tests for the command line entry point.
"""

import asyncio
import csv

import pytest

from hotel_scraper import cli, manager
from hotel_scraper.base import FetchError, FetchTimeout
from hotel_scraper.settings import Settings

from conftest import FakeCrawler, make_card, make_page


def read_rows(path):
    with open(path, newline='', encoding='utf-8') as f:
        return list(csv.reader(f))


@pytest.fixture
def use_crawler(monkeypatch):
    """Make the CLI build its scraper on top of a FakeCrawler."""
    def _install(crawler):
        monkeypatch.setattr(manager, 'create_crawler', lambda config, app_settings=None: crawler)
        return crawler
    return _install


class TestArguments:
    """Test argument validation."""

    def test_missing_country(self, capsys):
        assert cli.main([]) == cli.EXIT_USAGE

        err = capsys.readouterr().err
        assert "usage" in err
        assert "country" in err

    def test_target_must_be_positive(self, capsys):
        assert cli.main(["-n", "0", "Portugal"]) == cli.EXIT_USAGE

    def test_unusable_country_name(self):
        assert cli.main(["!!!"]) == cli.EXIT_USAGE

    def test_unknown_site(self, capsys):
        assert cli.main(["--site", "expedia", "Portugal"]) == cli.EXIT_USAGE
        assert "unknown site" in capsys.readouterr().err

    @pytest.mark.parametrize("flags", [
        ["--max-retries", "-1"],
        ["--max-pages", "0"],
        ["--delay", "-1"],
        ["--timeout", "0"],
        ["--deadline", "0"],
    ])
    def test_invalid_flag_values(self, flags, capsys):
        assert cli.main(flags + ["Portugal"]) == cli.EXIT_USAGE
        assert "error" in capsys.readouterr().err

    def test_list_sites(self, capsys):
        assert cli.main(["--list"]) == cli.EXIT_OK
        assert "booking" in capsys.readouterr().out

    def test_flags_override_settings(self):
        args = cli.build_parser().parse_args(
            ["--static", "--no-headless", "--max-retries", "0", "--delay", "1.5",
             "--timeout", "10", "--max-pages", "3", "Portugal"]
        )

        overridden = cli.settings_from_args(args, Settings())

        assert overridden.static is True
        assert overridden.headless is False
        assert overridden.max_page_retries == 0
        assert overridden.page_delay == 1.5
        assert overridden.fetch_timeout == 10
        assert overridden.max_pages == 3

    def test_defaults(self):
        args = cli.build_parser().parse_args(["Portugal"])

        assert args.target is None
        assert cli.settings_from_args(args, Settings()).site == "booking"


class TestRun:
    """Test full runs against a fake crawler."""

    def test_writes_requested_number_of_rows(self, tmp_path, use_crawler):
        use_crawler(FakeCrawler([make_page([make_card(f"Hotel {i}", "Lisbon", "US$1,000") for i in range(25)])]))
        out = tmp_path / "out.csv"

        code = cli.main(["-n", "10", "--delay", "0", "-o", str(out), "Portugal"])

        assert code == cli.EXIT_OK
        rows = read_rows(out)
        assert rows[0] == ["Name", "Location", "Price"]
        assert len(rows) == 11
        assert rows[1] == ["Hotel 0", "Lisbon", "1000"]

    def test_derived_output_filename(self, tmp_path, monkeypatch, use_crawler):
        monkeypatch.chdir(tmp_path)
        use_crawler(FakeCrawler([make_page([make_card("Motel")]), make_page([])]))

        code = cli.main(["--delay", "0", "United States"])

        assert code == cli.EXIT_OK
        assert (tmp_path / "united_states_hotels.csv").exists()

    def test_no_results_fails_without_file(self, tmp_path, monkeypatch, use_crawler):
        monkeypatch.chdir(tmp_path)
        use_crawler(FakeCrawler(default=make_page([])))

        code = cli.main(["--delay", "0", "Atlantis"])

        assert code == cli.EXIT_FAILURE
        assert not (tmp_path / "atlantis_hotels.csv").exists()

    def test_retries_exhausted_fails(self, tmp_path, use_crawler):
        use_crawler(FakeCrawler([FetchError("down")] * 3))
        out = tmp_path / "out.csv"

        code = cli.main(["--delay", "0", "--max-retries", "2", "-o", str(out), "Portugal"])

        assert code == cli.EXIT_FAILURE
        assert not out.exists()

    def test_retries_exhausted_keeps_partial_results(self, tmp_path, use_crawler):
        first_page = make_page([make_card(f"Hotel {i}", "Lisbon", "US$100") for i in range(25)])
        use_crawler(FakeCrawler([first_page], default=FetchTimeout("past the last page")))
        out = tmp_path / "out.csv"

        code = cli.main(["--delay", "0", "--max-retries", "2", "-o", str(out), "Portugal"])

        assert code == cli.EXIT_FAILURE
        rows = read_rows(out)
        assert len(rows) == 26
        assert rows[25] == ["Hotel 24", "Lisbon", "100"]

    def test_cancelled_run_keeps_partial_results(self, tmp_path):
        crawler = FakeCrawler(default=make_page([make_card("Early Bird")]))
        out = tmp_path / "partial.csv"

        code = asyncio.run(cli.run_scrape(
            "Portugal", 50, str(out), Settings(page_delay=30), deadline=0.05, crawler=crawler,
        ))

        assert code == cli.EXIT_CANCELLED
        assert read_rows(out) == [["Name", "Location", "Price"], ["Early Bird", "", ""]]
        assert crawler.closed is True
