"""Device liveness derived from the most recent status report.

Devices publish telemetry periodically. A report older than the offline
threshold means the device has gone quiet, and its telemetry values must
no longer be shown even though a stale report is still held.
"""

from __future__ import annotations

import time

from pylumen._constants import OFFLINE_THRESHOLD_SECONDS
from pylumen.models.status import StatusReport


def is_online(
    status: StatusReport | None,
    now: float | None = None,
    *,
    threshold: float = OFFLINE_THRESHOLD_SECONDS,
) -> bool:
    """Return ``True`` when *status* is younger than *threshold* seconds.

    *now* is epoch seconds and defaults to the wall clock.
    """
    if status is None:
        return False
    if now is None:
        now = time.time()
    return (now - status.observed_at_epoch_seconds) < threshold


def visible_status(
    status: StatusReport | None,
    now: float | None = None,
    *,
    threshold: float = OFFLINE_THRESHOLD_SECONDS,
) -> StatusReport | None:
    """Return *status* while the device is online, ``None`` otherwise."""
    if is_online(status, now, threshold=threshold):
        return status
    return None
