import json

import pytest


def _json_lines(output):
    lines = []
    for line in output.splitlines():
        line = line.strip()
        if line.startswith("{"):
            lines.append(json.loads(line))
    return lines


@pytest.fixture(autouse=True)
def _no_data_env(monkeypatch):
    from listing_aggregator.config import reset_settings_cache

    monkeypatch.delenv("LISTINGS_BASE_URL", raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


def test_cli_dry_run_lists_resolved_sources(capsys):
    from listing_aggregator.__main__ import main

    main(["--location", "Miami Beach, FL", "--dry-run", "--log-json"])
    out = capsys.readouterr().out
    assert "City: miami beach" in out
    assert "commercial_miami_beach: commercial_export" in out
    entries = _json_lines(out)
    summary = entries[-1]
    assert summary["skipped"] == summary["total_sources"]
    assert all(e["status"] == "skipped" for e in entries[:-1])


def test_cli_text_output(capsys, datasets_dir):
    from listing_aggregator.__main__ import main

    main(["--data-dir", str(datasets_dir), "--min-price", "500000", "--max-price", "1000000"])
    out = capsys.readouterr().out
    assert "Found 1 properties (page 1 of 1):" in out
    assert "1. [auction] Multifamily - 1500 Collins Ave, Miami Beach, FL - $750,000" in out
    summary = _json_lines(out)[-1]
    assert summary["total_items"] == 1
    assert summary["dropped_records"] == 2


def test_cli_json_output_and_log_lines(capsys, datasets_dir):
    from listing_aggregator.__main__ import main

    main(["--data-dir", str(datasets_dir), "--location", "houston", "--format", "json", "--log-json"])
    out = capsys.readouterr().out
    lines = _json_lines(out)
    payload = lines[0]
    assert [item["id"] for item in payload["page_items"]] == ["p-300"]
    log_entries = [l for l in lines[1:-1] if "source" in l]
    assert [e["source"] for e in log_entries] == [
        "commercial_combined",
        "commercial_combined_2",
        "commercial_houston",
        "residential_houston_sale",
        "residential_houston_lease",
    ]
    assert lines[-1]["failed"] == 3


def test_safe_main_reports_errors_as_json(monkeypatch, capsys):
    from listing_aggregator import __main__ as cli

    def boom(argv=None):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(cli, "main", boom)
    with pytest.raises(SystemExit) as excinfo:
        cli._safe_main()
    assert excinfo.value.code == 1
    assert json.loads(capsys.readouterr().out) == {"error": "kaboom"}
