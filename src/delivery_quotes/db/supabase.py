"""Supabase client for Python backend."""

import logging
from functools import lru_cache

from supabase import Client, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None


# Example usage patterns:
#
# # Conditional update (single statement, used for one-shot quote linking)
# result = supabase.table('delivery_quotes') \
#     .update({'order_id': 'ord_1', 'used_at': now_iso}) \
#     .eq('id', quote_id) \
#     .is_('used_at', 'null') \
#     .gte('expires_at', now_iso) \
#     .execute()
#
# # Select with filters
# result = supabase.table('pricing_rules') \
#     .select('*') \
#     .eq('zone_id', zone_id) \
#     .eq('status', 'active') \
#     .execute()
