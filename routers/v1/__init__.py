# routers/v1/__init__.py
from fastapi import APIRouter

from . import (
    crew, vessels, lookups, wages, forex, government_rates,
    payroll, deductions, remittance,
)

api_v1 = APIRouter()
api_v1.include_router(crew.router)
api_v1.include_router(payroll.router)          # /crew/{code}/payrolls
api_v1.include_router(vessels.type_router)     # /vessel/type before /vessel/{id}
api_v1.include_router(vessels.router)
api_v1.include_router(lookups.lookups)

# wages: scale + scale-v2 + description + forex
api_v1.include_router(wages.scale_router)
api_v1.include_router(wages.router)
api_v1.include_router(wages.description_router)
api_v1.include_router(forex.router)

api_v1.include_router(government_rates.router)
api_v1.include_router(deductions.router)
api_v1.include_router(remittance.router)

__all__ = ["api_v1"]
