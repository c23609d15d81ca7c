"""Quiz session engine: clock, scoring, players, answer ledger, sessions, results.

This package contains the domain logic imported by the HTTP blueprints,
keeping transport concerns separated from the session state machine.
"""
