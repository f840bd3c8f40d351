"""
Metrics tracking for TrackBot
"""
from typing import Dict

# --- Metrics ---
_METRICS = {
    "messages_seen": 0,
    "commands_ping": 0,
    "commands_summon": 0,
    "commands_dismiss": 0,
    "commands_play": 0,
    "reply_failures": 0,
    "voice_connect_success": 0,
    "voice_connect_failures": 0,
    "voice_disconnects": 0,
    "track_not_found": 0,
    "playback_start": 0,
    "playback_finish": 0,
    "playback_error": 0,
    "playback_preempted": 0,
}

def metric_inc(name: str, delta: int = 1):
    """Increment a metric by delta."""
    _METRICS[name] = _METRICS.get(name, 0) + delta

def metrics_snapshot() -> Dict[str, int]:
    """Get a snapshot of current metrics."""
    return dict(_METRICS)

def metrics_reset():
    """Zero every counter (used by tests)."""
    for key in _METRICS:
        _METRICS[key] = 0
