from __future__ import annotations

from datetime import datetime, timezone

from brewmon.query.plan import AggregateStage, QueryPlan, ScopeKind, TimeBound

PIVOT = 'pivot(rowKey: ["_time"], columnKey: ["_field"], valueColumn: "_value")'


def to_rfc3339(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def flux_str(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{escaped}"'


def flux_time(bound: TimeBound) -> str:
    if bound.at is not None:
        return f"time(v: {flux_str(to_rfc3339(bound.at))})"
    if bound.offset is not None:
        return bound.offset.literal
    return "now()"


def render(plan: QueryPlan) -> str:
    """Render a logical plan as a Flux script."""
    if not plan.stages:
        return _render_raw(plan)
    return _render_aggregated(plan)


def _source(plan: QueryPlan) -> list[str]:
    lines = [
        f"from(bucket: {flux_str(plan.bucket)})",
        f"  |> range(start: {flux_time(plan.time_range.start)}, stop: {flux_time(plan.time_range.stop)})",
        f'  |> filter(fn: (r) => r["_measurement"] == {flux_str(plan.measurement)})',
    ]
    if plan.scope.kind is ScopeKind.DEVICE:
        lines.append(f'  |> filter(fn: (r) => r["device_id"] == {flux_str(plan.scope.value)})')
    return lines


def _render_raw(plan: QueryPlan) -> str:
    lines = _source(plan)
    lines.append(f"  |> {PIVOT}")
    if plan.scope.kind is ScopeKind.LOCATION:
        lines.append(f'  |> filter(fn: (r) => r["location"] == {flux_str(plan.scope.value)})')
    return "\n".join(lines) + "\n"


def _render_stage(stage: AggregateStage) -> str:
    fn = stage.function.value
    return (
        f"{stage.name} = data\n"
        f"  |> aggregateWindow(every: {stage.every.literal}, fn: {fn}, createEmpty: false)\n"
        f'  |> set(key: "_aggregate", value: {flux_str(fn)})\n'
        f'  |> map(fn: (r) => ({{ r with _field: "{stage.field_prefix}${{r._field}}" }}))\n'
    )


def _render_aggregated(plan: QueryPlan) -> str:
    lines = _source(plan)
    field_predicate = " or ".join(f'r["_field"] == {flux_str(f)}' for f in plan.fields)
    lines.append(f"  |> filter(fn: (r) => {field_predicate})")
    blocks = ["data = " + "\n".join(lines) + "\n"]
    blocks.extend(_render_stage(stage) for stage in plan.stages)

    if len(plan.stages) == 1:
        merged = plan.stages[0].name
    else:
        merged = f"union(tables: [{', '.join(stage.name for stage in plan.stages)}])"

    # Regroup so every stage for one device shares a table, then the pivot joins
    # them into one row per window.
    blocks.append(
        f"{merged}\n"
        '  |> group(columns: ["device_id"])\n'
        f"  |> {PIVOT}\n"
        '  |> sort(columns: ["_time"])\n'
    )
    return "\n".join(blocks)
