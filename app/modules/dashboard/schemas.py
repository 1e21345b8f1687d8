# app/modules/dashboard/schemas.py
from typing import Any, Dict, List
from enum import Enum
from app.shared.schemas.common import BaseResponse

class SalesPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

class DashboardSummaryResponse(BaseResponse):
    data: Dict[str, Any]

class SalesByPeriodResponse(BaseResponse):
    period: SalesPeriod
    data: List[Dict[str, Any]]

class InventoryStatusResponse(BaseResponse):
    data: Dict[str, Any]

class RankingResponse(BaseResponse):
    count: int
    data: List[Dict[str, Any]]
