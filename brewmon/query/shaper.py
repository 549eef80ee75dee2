from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from brewmon.query.aggregations import AggregateKey, AggregationFunction, aggregate_keys
from brewmon.query.plan import QueryMode

RawRow = Mapping[str, Any]
OutputRecord = dict[str, Any]

RAW_FIELDS: tuple[tuple[str, str], ...] = (
    ("_time", "timestampSampled"),
    ("device_id", "deviceId"),
    ("temperature", "temperature"),
    ("humidity", "humidity"),
    ("location", "location"),
)


def shape(
    rows: Iterable[RawRow],
    mode: QueryMode,
    aggregations: list[AggregationFunction],
) -> Iterator[OutputRecord]:
    """Turn store rows into output records in a single forward pass.

    Raw rows map their columns one-to-one onto camelCase keys. Aggregated rows
    keep ``timestamp`` and ``deviceId`` plus one ``{function}_{metric}`` value
    for each requested function, so store bookkeeping columns are dropped.
    Missing columns are omitted rather than treated as errors.
    """
    if mode is QueryMode.RAW:
        for row in rows:
            yield shape_raw(row)
        return

    keys = aggregate_keys(aggregations)
    for row in rows:
        yield shape_aggregated(row, keys)


def shape_raw(row: RawRow) -> OutputRecord:
    return {out: row[src] for src, out in RAW_FIELDS if src in row}


def shape_aggregated(row: RawRow, keys: list[AggregateKey]) -> OutputRecord:
    record: OutputRecord = {
        "timestamp": row.get("_time"),
        "deviceId": row.get("device_id"),
    }
    for key in keys:
        if key.field_name in row:
            record[key.field_name] = row[key.field_name]
    return record
