from buddy.modules.fees.models import LogType, PaymentLog, Term
from buddy.modules.fees.service import FeeQueryService, FeeTermService, PaymentLogService
from buddy.modules.fees.router import router

__all__ = [
    "LogType",
    "PaymentLog",
    "Term",
    "FeeQueryService",
    "FeeTermService",
    "PaymentLogService",
    "router",
]
