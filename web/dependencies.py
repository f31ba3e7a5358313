"""
Shared FastAPI dependencies.

Routes receive the engine through Depends() so tests can swap in an
isolated service with app.dependency_overrides.
"""

from core.orders.service import EvaluationService, get_evaluation_service
from reporting.report_pdf import EvaluationReportGenerator
from utils.config import Config


def get_config() -> Config:
    return Config.load()


def get_service() -> EvaluationService:
    """Process-wide evaluation service."""
    return get_evaluation_service()


def get_report_generator() -> EvaluationReportGenerator:
    return EvaluationReportGenerator(output_dir=get_config().reports_dir)
