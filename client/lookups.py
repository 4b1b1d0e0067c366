# client/lookups.py
from typing import Dict, List, Optional

from client.api import ApiResult, CrewApiClient


class Lookups:
    """
    Page-scoped reference lists for the movement forms (ranks, vessels,
    ports, countries). load() fills them, reset() drops them when the page
    closes.
    """

    SOURCES = {
        "ranks": "list_ranks",
        "vessels": "list_vessels",
        "ports": "list_ports",
        "countries": "list_countries",
    }

    def __init__(self, api: CrewApiClient):
        self.api = api
        self.reset()

    def reset(self):
        self.ranks: List[dict] = []
        self.vessels: List[dict] = []
        self.ports: List[dict] = []
        self.countries: List[dict] = []
        self.loaded = False

    def load(self) -> ApiResult:
        """Fetch every list; the first failure is returned and the rest kept empty"""
        fetched: Dict[str, list] = {}
        for name, method in self.SOURCES.items():
            res = getattr(self.api, method)()
            if not res.success:
                self.reset()
                return ApiResult(success=False, message=f"Failed to load {name}: {res.message}")
            fetched[name] = res.data or []
        for name, rows in fetched.items():
            setattr(self, name, rows)
        self.loaded = True
        return ApiResult(success=True)

    def ports_in(self, country_id: Optional[int]) -> List[dict]:
        if country_id is None:
            return list(self.ports)
        return [p for p in self.ports if p.get("countryId") == country_id]

    def rank_name(self, rank_id: Optional[int]) -> Optional[str]:
        for r in self.ranks:
            if r.get("id") == rank_id:
                return r.get("name")
        return None
