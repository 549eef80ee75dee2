from __future__ import annotations

import logging

from influxdb_client import InfluxDBClient

from brewmon.core.config import Settings

logger = logging.getLogger(__name__)


def create_influx_client(settings: Settings) -> InfluxDBClient:
    """Create the process-wide store client shared by every request.

    The client owns its own connection pool and is safe to use from the
    request threadpool.
    """
    logger.info(
        "Connecting to InfluxDB at %s (org=%s, bucket=%s)",
        settings.influx_url,
        settings.influx_org,
        settings.influx_bucket,
    )
    return InfluxDBClient(
        url=str(settings.influx_url),
        token=settings.influx_token,
        org=settings.influx_org,
        timeout=settings.influx_timeout_ms,
        enable_gzip=True,
    )
