"""
Test Suite: Command-line interface
"""

import json

import pytest

from app.cli import main


@pytest.fixture
def request_file(tmp_path, make_entry, entry_dict, now):
    entries = [make_entry(2), make_entry(1)]
    path = tmp_path / "request.json"
    path.write_text(
        json.dumps(
            {
                "now": now.isoformat(),
                "estimatedWorkDays": 10,
                "timeEntries": [entry_dict(e) for e in entries],
            }
        ),
        encoding="utf-8",
    )
    return path


class TestCli:
    def test_analyze(self, request_file, capsys):
        main(["analyze", str(request_file)])

        out = capsys.readouterr().out
        assert "[analyze] Trajectory: ok" in out
        assert '"calendarDaysNeeded"' in out

    def test_analyze_missing_file(self, tmp_path):
        with pytest.raises(SystemExit, match="not found"):
            main(["analyze", str(tmp_path / "nope.json")])

    def test_analyze_invalid_request(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text('{"estimatedWorkDays": 1}', encoding="utf-8")

        with pytest.raises(SystemExit, match="Invalid request"):
            main(["analyze", str(path)])

    def test_analyze_csv(self, tmp_path, capsys):
        entries = tmp_path / "entries.csv"
        entries.write_text(
            "id,work_item_id,start_time,duration_seconds,end_time\n"
            "e1,w1,2024-03-08T09:00:00,14400,\n"
            "e2,w1,2024-03-09T09:00:00,14400,\n",
            encoding="utf-8",
        )
        items = tmp_path / "items.csv"
        items.write_text("id,label,estimated_work_days\nw1,Design,2\n", encoding="utf-8")

        main(["analyze-csv", str(entries), str(items), "--now", "2024-03-10T12:00:00"])

        out = capsys.readouterr().out
        assert "Loaded 2 entries, 1 work items." in out
        assert '"workItemId": "w1"' in out

    def test_show_config(self, capsys):
        main(["show-config"])

        config = json.loads(capsys.readouterr().out)
        assert config["work_day_seconds"] == 28800
