"""Integration adapters for external systems (NetSuite, HubSpot).

Keep these modules small and testable:
- No FastAPI request/response objects
- No matching or reconciliation decisions
- Pure IO + parsing helpers
"""
