from __future__ import annotations

import argparse
import csv
import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Sequence

import httpx

from airroute.alternatives import compute_alternatives, route_summary
from airroute.london_network import default_edges, default_network
from airroute.models import AlternativesBundle, Weights

CSV_FIELDS = (
    "request_index",
    "start",
    "end",
    "kind",
    "found",
    "total_distance_km",
    "total_time_min",
    "average_aqi",
    "path",
)


def _utc_now_compact() -> str:
    return datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute route alternatives for a list of node pairs headlessly."
    )
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--input-json", default=None)
    group.add_argument("--input-csv", default=None)
    parser.add_argument("--backend-url", default="http://localhost:8000")
    parser.add_argument(
        "--inprocess",
        action="store_true",
        help="Solve against the built-in network instead of calling a backend.",
    )
    parser.add_argument("--w-distance", type=float, default=0.33)
    parser.add_argument("--w-time", type=float, default=0.33)
    parser.add_argument("--w-aqi", type=float, default=0.34)
    parser.add_argument("--save-dir", default="out/headless")
    parser.add_argument("--summary-path", default=None)
    return parser


def load_requests_from_json(path: str) -> list[dict[str, Any]]:
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object")
    requests = payload.get("requests")
    if not isinstance(requests, list) or not requests:
        raise ValueError("JSON payload must contain a non-empty 'requests' list")
    return [dict(item) for item in requests]


def load_requests_from_csv(path: str, *, default_weights: Weights) -> list[dict[str, Any]]:
    requests: list[dict[str, Any]] = []
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not {"start", "end"}.issubset(set(reader.fieldnames or [])):
            raise ValueError("CSV must include columns: start, end")

        for row in reader:
            weights = default_weights.model_dump()
            for field, column in (("distance", "w_distance"), ("time", "w_time"), ("aqi", "w_aqi")):
                raw = (row.get(column) or "").strip()
                if raw:
                    weights[field] = float(raw)
            requests.append(
                {"start": row["start"].strip(), "end": row["end"].strip(), "weights": weights}
            )

    if not requests:
        raise ValueError("CSV input produced zero requests")
    return requests


def _solve_inprocess(request: dict[str, Any]) -> dict[str, Any]:
    bundle = compute_alternatives(
        default_network(),
        default_edges(),
        start=str(request["start"]),
        end=str(request["end"]),
        weights=Weights.model_validate(request.get("weights") or {"distance": 0.33, "time": 0.33, "aqi": 0.34}),
    )
    return bundle.model_dump(mode="json")


def _csv_rows(index: int, bundle: dict[str, Any]) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for kind, route in bundle["routes"].items():
        rows.append(
            {
                "request_index": index,
                "start": bundle["start"],
                "end": bundle["end"],
                "kind": kind,
                "found": route["found"],
                "total_distance_km": route["total_distance_km"],
                "total_time_min": route["total_time_min"],
                "average_aqi": route["average_aqi"],
                "path": "-".join(route["path"]),
            }
        )
    return rows


def execute_headless_run(
    requests: list[dict[str, Any]],
    *,
    backend_url: str,
    save_dir: str,
    summary_path: str | None = None,
    client: httpx.Client | None = None,
    inprocess: bool = False,
) -> dict[str, Any]:
    base = backend_url.rstrip("/")
    own_client = client is None and not inprocess
    if client is None and not inprocess:
        client = httpx.Client(timeout=30.0)

    run_dir = Path(save_dir) / _utc_now_compact()
    run_dir.mkdir(parents=True, exist_ok=True)

    try:
        results: list[dict[str, Any]] = []
        csv_rows: list[dict[str, Any]] = []
        for idx, request in enumerate(requests):
            try:
                if inprocess:
                    bundle = _solve_inprocess(request)
                else:
                    assert client is not None
                    resp = client.post(f"{base}/alternatives", json=request)
                    resp.raise_for_status()
                    bundle = resp.json()
            except (httpx.HTTPError, ValueError) as e:
                results.append({"request_index": idx, "request": request, "error": str(e)})
                continue

            summary_rows = route_summary(AlternativesBundle.model_validate(bundle))
            results.append({"request_index": idx, "request": request, "error": None, "summary": summary_rows})
            csv_rows.extend(_csv_rows(idx, bundle))

        results_file = run_dir / "results.json"
        results_file.write_text(json.dumps(results, indent=2), encoding="utf-8")
        csv_file = run_dir / "results.csv"
        with csv_file.open("w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(CSV_FIELDS))
            writer.writeheader()
            writer.writerows(csv_rows)

        summary = {
            "timestamp": datetime.now(UTC).isoformat(),
            "mode": "inprocess" if inprocess else "http",
            "request_count": len(requests),
            "error_count": sum(1 for item in results if item["error"]),
            "saved_dir": str(run_dir),
            "results_file": str(results_file),
            "csv_file": str(csv_file),
        }
        summary_file = Path(summary_path) if summary_path else run_dir / "headless_summary.json"
        summary_file.parent.mkdir(parents=True, exist_ok=True)
        summary_file.write_text(json.dumps(summary, indent=2), encoding="utf-8")
        summary["summary_file"] = str(summary_file)
        return summary
    finally:
        if own_client and client is not None:
            client.close()


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(list(argv) if argv is not None else None)

    if args.input_json:
        requests = load_requests_from_json(args.input_json)
    else:
        requests = load_requests_from_csv(
            args.input_csv,
            default_weights=Weights(distance=args.w_distance, time=args.w_time, aqi=args.w_aqi),
        )

    summary = execute_headless_run(
        requests,
        backend_url=args.backend_url,
        save_dir=args.save_dir,
        summary_path=args.summary_path,
        inprocess=args.inprocess,
    )
    print(json.dumps(summary, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
