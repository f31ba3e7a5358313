"""
Reporting module for Proofly.

Renders property evaluation reports as PDFs.

Usage:
    from reporting import EvaluationReportGenerator

    generator = EvaluationReportGenerator(output_dir="data/reports")
    result = generator.generate_report(order, report)
"""

from .report_pdf import (
    EvaluationReportGenerator,
    ReportNotReady,
    ReportResult,
    ReportSuccess,
    generate_evaluation_pdf,
)

__all__ = [
    "EvaluationReportGenerator",
    "ReportNotReady",
    "ReportResult",
    "ReportSuccess",
    "generate_evaluation_pdf",
]
