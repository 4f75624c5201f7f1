"""
Tests for the command-line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from benchmark_history.cli import app
from benchmark_history.core.datafile import load_data_file, save_data_file
from benchmark_history.core.validation import validate_data

from conftest import DATA_DIR, REPO_URL

runner = CliRunner()


@pytest.fixture
def history_file(tmp_path, history_data):
    return save_data_file(history_data, tmp_path / "data.js")


@pytest.fixture
def event_file(tmp_path, push_event):
    path = tmp_path / "event.json"
    path.write_text(json.dumps(push_event), encoding="utf-8")
    return path


@pytest.fixture
def output_file(tmp_path, julia_output):
    path = tmp_path / "output.json"
    path.write_text(julia_output, encoding="utf-8")
    return path


class TestShow:
    def test_show(self):
        result = runner.invoke(app, ["show", str(DATA_DIR / "data.js")])
        assert result.exit_code == 0
        assert "ec749b6" in result.output
        assert "factorize/1" in result.output

    def test_unknown_suite(self):
        result = runner.invoke(app, ["show", str(DATA_DIR / "data.js"), "--suite", "Nope"])
        assert result.exit_code == 1
        assert "Unknown suite" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["show", str(tmp_path / "missing.js")])
        assert result.exit_code == 1
        assert "Error reading benchmark data" in result.output


class TestValidate:
    def test_valid(self):
        result = runner.invoke(app, ["validate", str(DATA_DIR / "data.js")])
        assert result.exit_code == 0
        assert "OK" in result.output

    def test_invalid(self, tmp_path, history_data):
        history_data.last_update = 1
        path = save_data_file(history_data, tmp_path / "data.js")

        result = runner.invoke(app, ["validate", str(path)])
        assert result.exit_code == 1
        assert "lastUpdate" in result.output

    def test_env_var_path(self, history_file):
        result = runner.invoke(
            app, ["validate"], env={"BENCHMARK_DATA_FILE": str(history_file)}
        )
        assert result.exit_code == 0


class TestHistory:
    def test_history(self, history_file):
        result = runner.invoke(app, ["history", str(history_file), "--bench", "factorize/1"])
        assert result.exit_code == 0
        assert "n=4" in result.output
        assert "Memory stable: True" in result.output

    def test_unknown_bench(self, history_file):
        result = runner.invoke(app, ["history", str(history_file), "-b", "missing"])
        assert result.exit_code == 1

    def test_env_var_path(self, history_file):
        result = runner.invoke(
            app,
            ["history", "--bench", "factorize/1"],
            env={"BENCHMARK_DATA_FILE": str(history_file)},
        )
        assert result.exit_code == 0, result.output
        assert "n=4" in result.output


class TestCompare:
    def test_compare(self, history_file):
        result = runner.invoke(app, ["compare", str(history_file)])
        assert result.exit_code == 0
        assert "factorize/1" in result.output
        assert "ALERT" not in result.output

    def test_compare_low_threshold(self, history_file):
        result = runner.invoke(app, ["compare", str(history_file), "--threshold", "1.01"])
        assert result.exit_code == 0
        assert "ALERT" in result.output

    def test_compare_single_entry(self):
        result = runner.invoke(app, ["compare", str(DATA_DIR / "data.js")])
        assert result.exit_code == 0
        assert "at least two entries" in result.output


class TestAppend:
    def test_append_new_file(self, tmp_path, output_file, event_file):
        data_path = tmp_path / "dev" / "bench" / "data.js"
        result = runner.invoke(
            app,
            [
                "append", str(data_path), "--output", str(output_file),
                "--tool", "julia",
                "--event", str(event_file),
                "--repo-url", REPO_URL,
            ],
        )
        assert result.exit_code == 0, result.output
        assert "Recorded 1 bench(es)" in result.output

        data = load_data_file(data_path)
        [entry] = data.entries["Benchmark"]
        assert entry.commit.short_id == "9a1f3b2"
        assert entry.benches[0].name == "factorize/1"
        assert data.last_update >= entry.date
        assert validate_data(data).ok

    def test_append_with_alert(self, history_file, tmp_path, event_file):
        slow = [{"name": "factorize/1", "value": 99999999.0, "unit": "ns"}]
        output = tmp_path / "slow.json"
        output.write_text(json.dumps(slow), encoding="utf-8")

        args = [
            "append", str(history_file), "-o", str(output),
            "--tool", "customSmallerIsBetter",
            "--event", str(event_file),
            "--fail-on-alert",
        ]
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "Possible performance regression" in result.output

        # the entry is still recorded
        assert len(load_data_file(history_file).entries["Benchmark"]) == 5

    def test_append_duplicate_commit(self, history_file, output_file, event_file):
        args = [
            "append", str(history_file), "-o", str(output_file),
            "--tool", "julia", "--event", str(event_file),
        ]
        assert runner.invoke(app, args).exit_code == 0

        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert "already has" in result.output

    def test_append_without_commit_source(self, history_file, output_file):
        result = runner.invoke(
            app,
            ["append", str(history_file), "-o", str(output_file), "--tool", "julia"],
            env={"GITHUB_EVENT_PATH": ""},
        )
        assert result.exit_code == 1
        assert "No commit source" in result.output

    def test_append_unknown_tool(self, history_file, output_file, event_file):
        result = runner.invoke(
            app,
            [
                "append", str(history_file), "-o", str(output_file),
                "--tool", "gobench", "--event", str(event_file),
            ],
        )
        assert result.exit_code == 1
        assert "Unknown tool" in result.output

    def test_append_rejects_invalid_benches(self, history_file, tmp_path, event_file):
        bad = [{"name": "factorize/1", "value": -5, "unit": ""}]
        output = tmp_path / "bad.json"
        output.write_text(json.dumps(bad), encoding="utf-8")

        result = runner.invoke(
            app,
            [
                "append", str(history_file), "-o", str(output),
                "--tool", "customSmallerIsBetter", "--event", str(event_file),
            ],
        )
        assert result.exit_code == 1
        assert "Error appending" in result.output

        data = load_data_file(history_file)
        assert len(data.entries["Benchmark"]) == 4
        assert validate_data(data).ok

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda estimate: estimate.update(time="fast"),
            lambda estimate: estimate.update(memory=None),
            lambda estimate: estimate.clear(),
        ],
    )
    def test_append_rejects_malformed_julia_output(
        self, history_file, tmp_path, event_file, julia_output, mutate
    ):
        document = json.loads(julia_output)
        mutate(document[1][0][1]["data"]["factorize"][1]["data"]["1"][1])
        output = tmp_path / "output.json"
        output.write_text(json.dumps(document), encoding="utf-8")

        result = runner.invoke(
            app,
            [
                "append", str(history_file), "-o", str(output),
                "--tool", "julia", "--event", str(event_file),
            ],
        )
        assert result.exit_code == 1
        assert "Error appending" in result.output

        # the history file is untouched and still loads
        assert len(load_data_file(history_file).entries["Benchmark"]) == 4

    def test_append_trial_estimate_without_payload(self, history_file, tmp_path, event_file):
        output = tmp_path / "output.json"
        output.write_text(
            '[{}, [["BenchmarkGroup", {"data": {"f": ["TrialEstimate"]}, "tags": []}]]]',
            encoding="utf-8",
        )
        result = runner.invoke(
            app,
            [
                "append", str(history_file), "-o", str(output),
                "--tool", "julia", "--event", str(event_file),
            ],
        )
        assert result.exit_code == 1
        assert "Error appending" in result.output

    def test_append_data_file_from_env(self, history_file, output_file, event_file):
        result = runner.invoke(
            app,
            ["append", "-o", str(output_file), "--tool", "julia", "--event", str(event_file)],
            env={"BENCHMARK_DATA_FILE": str(history_file)},
        )
        assert result.exit_code == 0, result.output
        assert len(load_data_file(history_file).entries["Benchmark"]) == 5


class TestConvert:
    def test_convert_to_json(self, tmp_path):
        destination = tmp_path / "data.json"
        result = runner.invoke(app, ["convert", str(DATA_DIR / "data.js"), str(destination)])
        assert result.exit_code == 0

        document = json.loads(destination.read_text(encoding="utf-8"))
        assert document["entries"]["Benchmark"][0]["benches"][0]["name"] == "factorize/1"


def test_tools():
    result = runner.invoke(app, ["tools"])
    assert result.exit_code == 0
    assert "julia" in result.output
