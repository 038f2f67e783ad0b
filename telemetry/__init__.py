"""Frontend metrics relay for the hospital management system.

This app receives events relayed by the single-page frontend, counts the
recognised ones in a Prometheus registry, appends every event to a
JSON-lines log and serves the registry for scraping.
"""
