"""Use-case level logic.

These modules decide what to do with data returned by the integrations
(which HubSpot company a NetSuite customer belongs to, what to write).

They should be:
- deterministic given their collaborators
- unit-testable with in-memory stubs
- free of web/framework code
"""
