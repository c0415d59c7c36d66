"""
Supabase boundary modules.

Exports: SupabaseStorageClient, SupabaseAuthClient, AuthenticatedUser
"""

from .auth_client import AuthenticatedUser, SupabaseAuthClient
from .storage_client import SupabaseStorageClient, compute_file_hash

__all__ = ["AuthenticatedUser", "SupabaseAuthClient", "SupabaseStorageClient", "compute_file_hash"]
