"""OpenTelemetry 通知メトリクス定義"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("activity_notifier", version="0.1.0")

activities_tracked_total = _meter.create_counter(
    name="activities_tracked_total",
    description="Total number of tracked activities by outcome",
    unit="1",
)

notifications_total = _meter.create_counter(
    name="notifications_total",
    description="Total number of channel dispatch outcomes",
    unit="1",
)
