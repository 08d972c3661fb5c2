"""
Core models package for the wholesale marketplace
"""

from .audited_base import AuditedBase
