"""
Lead Domain
"""

from .entities import OTHER_TRADE, TRADE_OPTIONS, LeadDraft, format_phone

__all__ = ["LeadDraft", "format_phone", "TRADE_OPTIONS", "OTHER_TRADE"]
