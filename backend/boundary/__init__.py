"""
Boundary layer for external system integrations.

Handles all interactions with external systems (NocoDB, Supabase
storage and auth, the Claude API).
Provides adapters and clients for infrastructure dependencies.
"""
