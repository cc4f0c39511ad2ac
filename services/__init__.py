"""
Services Package

Stateful parts of the aggregation layer:
- price_aggregator.py: builds snapshots from prices + fee estimates
- update_orchestrator.py: triggers, busy flag, cache writes, notifications
- scheduler.py: named recurring alarms
- badge.py: badge derivation and the display surface
- summary.py: display-time formatting of a snapshot
- event_bus.py: pub/sub for observers
"""
