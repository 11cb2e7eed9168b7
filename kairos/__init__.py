from kairos.dashboard import KairosDashboard
from kairos.completion import CompletionClient
from kairos.storage import SupabaseStore

__all__ = ["KairosDashboard", "CompletionClient", "SupabaseStore"]
