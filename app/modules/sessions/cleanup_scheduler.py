import asyncio
import logging
from app.config.settings import settings
from app.database.supabase_client import get_supabase
from app.modules.sessions.service import SessionStore

logger = logging.getLogger(__name__)


def cleanup_expired_sessions() -> int:
    """Remove expired user and admin sessions. Returns the number of rows deleted."""
    supabase = get_supabase()
    removed = 0
    for kind in ("user", "admin"):
        try:
            removed += SessionStore(supabase, kind).cleanup_expired()
        except Exception as e:
            logger.error(f"Error cleaning up expired {kind} sessions: {str(e)}")
    if removed:
        logger.info(f"Removed {removed} expired session(s)")
    else:
        logger.debug("No expired sessions found")
    return removed


async def session_cleanup_loop():
    """Background task that periodically sweeps expired sessions"""
    interval = settings.session_cleanup_interval_seconds
    while True:
        try:
            await asyncio.to_thread(cleanup_expired_sessions)
        except Exception as e:
            logger.error(f"Error in session cleanup loop: {str(e)}")

        await asyncio.sleep(interval)
