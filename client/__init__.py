from client.api import ApiResult, CrewApiClient
from client.crew_search import filter_crew
from client.forex import is_forex_locked
from client.forms import FormState, build_batch_join_payload
from client.lookups import Lookups

__all__ = [
    "ApiResult", "CrewApiClient", "filter_crew", "is_forex_locked",
    "FormState", "build_batch_join_payload", "Lookups",
]
