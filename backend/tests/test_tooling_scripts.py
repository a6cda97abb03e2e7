from __future__ import annotations

import csv
import json
from pathlib import Path

import httpx
import pytest

from airroute.alternatives import compute_alternatives
from airroute.london_network import default_edges, default_network
from airroute.models import Weights
from scripts.run_headless_alternatives import (
    build_parser,
    execute_headless_run,
    load_requests_from_csv,
    load_requests_from_json,
    main,
)


def test_parser_requires_one_input_source() -> None:
    args = build_parser().parse_args(["--input-json", "pairs.json"])
    assert args.backend_url == "http://localhost:8000"
    assert args.inprocess is False
    assert (args.w_distance, args.w_time, args.w_aqi) == (0.33, 0.33, 0.34)
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--input-json", "a.json", "--input-csv", "b.csv"])


def test_load_requests_from_csv_applies_default_and_row_weights(tmp_path: Path) -> None:
    csv_path = tmp_path / "pairs.csv"
    csv_path.write_text("start,end,w_aqi\nW,T,\nA,J,0.9\n", encoding="utf-8")

    requests = load_requests_from_csv(str(csv_path), default_weights=Weights(distance=1, time=0, aqi=0))
    assert requests[0] == {"start": "W", "end": "T", "weights": {"distance": 1.0, "time": 0.0, "aqi": 0.0}}
    assert requests[1]["weights"]["aqi"] == 0.9


def test_load_requests_rejects_bad_inputs(tmp_path: Path) -> None:
    bad_csv = tmp_path / "bad.csv"
    bad_csv.write_text("origin,destination\nW,T\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_requests_from_csv(str(bad_csv), default_weights=Weights(distance=1, time=1, aqi=1))

    bad_json = tmp_path / "bad.json"
    bad_json.write_text(json.dumps({"pairs": []}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_requests_from_json(str(bad_json))


def test_execute_headless_run_with_mock_transport(tmp_path: Path) -> None:
    seen: list[dict[str, object]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST" and request.url.path == "/alternatives":
            body = json.loads(request.content)
            seen.append(body)
            if body["end"] == "ZZ":
                return httpx.Response(404, json={"detail": {"reason_code": "invalid_node"}})
            bundle = compute_alternatives(
                default_network(),
                default_edges(),
                start=body["start"],
                end=body["end"],
                weights=Weights.model_validate(body["weights"]),
            )
            return httpx.Response(200, json=bundle.model_dump(mode="json"))
        return httpx.Response(404, json={"detail": "not found"})

    transport = httpx.MockTransport(handler)
    client = httpx.Client(transport=transport, base_url="http://testserver")
    try:
        summary = execute_headless_run(
            [
                {"start": "W", "end": "T", "weights": {"distance": 0.33, "time": 0.33, "aqi": 0.34}},
                {"start": "W", "end": "ZZ", "weights": {"distance": 1, "time": 0, "aqi": 0}},
            ],
            backend_url="http://testserver",
            save_dir=str(tmp_path / "headless"),
            client=client,
        )
    finally:
        client.close()

    assert len(seen) == 2
    assert summary["mode"] == "http"
    assert summary["request_count"] == 2
    assert summary["error_count"] == 1
    assert Path(summary["summary_file"]).exists()

    with Path(summary["csv_file"]).open(encoding="utf-8", newline="") as f:
        rows = list(csv.DictReader(f))
    assert [row["kind"] for row in rows] == ["custom", "shortest", "fastest", "cleanest"]
    assert all(row["path"].startswith("W-") for row in rows)

    results = json.loads(Path(summary["results_file"]).read_text(encoding="utf-8"))
    assert results[0]["error"] is None
    assert results[0]["summary"][0]["label"] == "Custom Route"
    assert "404" in results[1]["error"]


def test_main_inprocess_writes_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pairs = tmp_path / "pairs.json"
    pairs.write_text(json.dumps({"requests": [{"start": "A", "end": "J"}]}), encoding="utf-8")
    summary_path = tmp_path / "summary.json"

    code = main(
        [
            "--input-json",
            str(pairs),
            "--inprocess",
            "--save-dir",
            str(tmp_path / "out"),
            "--summary-path",
            str(summary_path),
        ]
    )

    assert code == 0
    summary = json.loads(summary_path.read_text(encoding="utf-8"))
    assert summary["mode"] == "inprocess"
    assert summary["error_count"] == 0
    assert json.loads(capsys.readouterr().out)["request_count"] == 1
