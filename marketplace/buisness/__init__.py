"""
Business layer: workflows, state machines and their compensating actions.

Workflows own their unit of work: they commit on success and roll back before
re-raising on failure, so callers never observe a half-applied change.
"""
