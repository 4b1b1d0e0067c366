# client/crew_search.py
from typing import Iterable, List, Mapping, Optional

from config import settings

ON_BOARD = 1
OFF_BOARD = 2


def _field(crew: Mapping, camel: str, snake: str):
    # rows come from the API (camelCase) or from local dicts (snake_case)
    value = crew.get(camel)
    return crew.get(snake) if value is None else value


def filter_crew(
    crews: Iterable[Mapping],
    query: Optional[str],
    status: Optional[int] = OFF_BOARD,
    limit: Optional[int] = None,
) -> List[Mapping]:
    """
    Crew whose first name, last name or crew code contains `query`
    (case-insensitive), narrowed to `status` and capped at `limit`.
    """
    limit = settings.crew_search_limit if limit is None else limit
    needle = (query or "").lower()

    out = []
    for crew in crews:
        if status is not None and _field(crew, "crewStatusId", "crew_status_id") != status:
            continue
        if needle:
            haystack = (
                _field(crew, "firstName", "first_name"),
                _field(crew, "lastName", "last_name"),
                _field(crew, "crewCode", "crew_code"),
            )
            if not any(needle in (h or "").lower() for h in haystack):
                continue
        out.append(crew)
        if len(out) >= limit:
            break
    return out
