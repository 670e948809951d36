# msgcheck package
from .checks import SUITES, Report, run_suite
from .config import ConfigError, Settings
from .conversations import conversation_partners
from .db_supabase import QueryError, QueryResult, SupabaseStore, close_store, get_store

__all__ = [
    'SUITES', 'Report', 'run_suite',
    'ConfigError', 'Settings',
    'conversation_partners',
    'QueryError', 'QueryResult', 'SupabaseStore', 'close_store', 'get_store',
]
