import json

from typer.testing import CliRunner

from cli import cli_app

runner = CliRunner()

FEED = {
    "tangles": [
        {"id": 1, "title": "Inbox"},
        {"id": 2, "title": "Ideas"},
    ],
    "links": [{"source_id": 1, "target_id": 2}],
}


def test_simulate_prints_settled_positions(tmp_path):
    feed_file = tmp_path / "feed.json"
    feed_file.write_text(json.dumps(FEED), encoding="utf-8")

    result = runner.invoke(cli_app, ["simulate", "--feed", str(feed_file), "--ticks", "50", "--seed", "3"])

    assert result.exit_code == 0
    assert "2 tangles, 1 links after 50 ticks" in result.output
    assert "Inbox" in result.output
    assert "Kinetic energy" in result.output


def test_frame_prints_display_list(tmp_path):
    feed_file = tmp_path / "feed.json"
    feed_file.write_text(json.dumps(FEED), encoding="utf-8")

    result = runner.invoke(cli_app, ["frame", "-f", str(feed_file), "-t", "5", "--search", "idea"])

    assert result.exit_code == 0
    assert '"highlighted"' in result.output


def test_missing_feed_file_exits_with_error(tmp_path):
    result = runner.invoke(cli_app, ["simulate", "--feed", str(tmp_path / "nope.json")])
    assert result.exit_code == 1
    assert "Error" in result.output
