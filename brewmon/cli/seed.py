from __future__ import annotations

import random
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Iterator, Optional

import httpx
import typer

app = typer.Typer(
    help="Post generated sensor readings to a running brewmon API.",
    context_settings={"help_option_names": ["-h", "--help"]},
)

TEMPERATURE_RANGE = (14.0, 21.0)
HUMIDITY_RANGE = (0.0, 100.0)


def generate_readings(
    *,
    device_id: str,
    location: str,
    start: datetime,
    days: int,
    interval_minutes: int = 15,
    rng: random.Random | None = None,
) -> Iterator[dict[str, Any]]:
    """Yield one reading every ``interval_minutes`` for ``days`` days."""
    rng = rng or random.Random()
    if start.tzinfo is None:
        start = start.replace(tzinfo=timezone.utc)
    step = timedelta(minutes=interval_minutes)
    stop = start + timedelta(days=days)
    ts = start
    while ts < stop:
        yield {
            "deviceId": device_id,
            "temperature": round(rng.uniform(*TEMPERATURE_RANGE), 2),
            "humidity": round(rng.uniform(*HUMIDITY_RANGE), 2),
            "location": location,
            "timestampSampled": ts.isoformat().replace("+00:00", "Z"),
        }
        ts += step


def post_readings(client: httpx.Client, readings: Iterable[dict[str, Any]]) -> tuple[int, int]:
    """Submit readings one by one and return ``(stored, failed)``."""
    stored = 0
    failed = 0
    for reading in readings:
        try:
            response = client.post("/records", json=reading)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            failed += 1
            typer.echo(f"Failed to store reading at {reading['timestampSampled']}: {exc}", err=True)
            continue
        stored += 1
    return stored, failed


@app.command()
def seed(
    base_url: str = typer.Option(
        "http://localhost:8080", "--base-url", "-b", help="brewmon API base URL."
    ),
    device_id: str = typer.Option("sensor_123", "--device-id", help="Device id to report as."),
    location: str = typer.Option("Room 1", "--location", help="Location of the device."),
    start: datetime = typer.Option(
        datetime(2024, 2, 1), "--start", help="Timestamp of the first reading (UTC)."
    ),
    days: int = typer.Option(9, "--days", min=1, help="Number of days to generate."),
    interval_minutes: int = typer.Option(
        15, "--interval", min=1, help="Minutes between readings."
    ),
    random_seed: Optional[int] = typer.Option(None, "--seed", help="Seed for repeatable data."),
) -> None:
    readings = generate_readings(
        device_id=device_id,
        location=location,
        start=start,
        days=days,
        interval_minutes=interval_minutes,
        rng=random.Random(random_seed),
    )
    with httpx.Client(base_url=base_url, timeout=30.0) as client:
        stored, failed = post_readings(client, readings)
    typer.echo(f"Stored {stored} readings ({failed} failed).")
    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
