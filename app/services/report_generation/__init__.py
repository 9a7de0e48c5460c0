"""
Report Generation Module

This module turns finished interview conversations into scored reports and
persists them as interview results.
"""

from .report_generator import ReportGenerator, compute_report
from .conversation_source import ConversationSource, VapiConversationSource

__all__ = ["ReportGenerator", "compute_report", "ConversationSource", "VapiConversationSource"]
