"""
                Table Ordering Backend

Self-ordering backend for dine-in tables: menu and store settings for the
ordering pages, order intake with staff push notifications, a daily
spreadsheet ledger and AI upsell suggestions.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
