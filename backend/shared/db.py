from supabase import create_client, Client

from config.settings import Settings


def get_supabase_client(settings: Settings) -> Client:
    """Get initialized Supabase client using the service-role key."""
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")

    return create_client(settings.supabase_url, settings.supabase_service_key)
