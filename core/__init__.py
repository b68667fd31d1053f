"""Core (UI-agnostic) fund transfer logic.

This package contains:
- typed accounts, transfers and account references
- account-scoped ledger derivation and totals
- client-side validation and amount parsing
- the REST client, snapshot store and periodic refresh
- page view state shared by the Streamlit page and the API
"""
