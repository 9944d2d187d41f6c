from fastapi import APIRouter

from dayflow.api.balances import employee_balance_router
from dayflow.api.requests import requests_router

api_router = APIRouter()
api_router.include_router(requests_router)
api_router.include_router(employee_balance_router)
