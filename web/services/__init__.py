"""
Web 서비스 패키지

원장 코어와 저장소를 조합하는 비즈니스 로직
"""

from web.services.centralization_service import CentralizationService
from web.services.chart_service import ChartService
from web.services.journal_service import JournalService
from web.services.report_service import ReportService

__all__ = [
    "CentralizationService",
    "ChartService",
    "JournalService",
    "ReportService",
]
