"""Unified command-line interface for ledgerkit.

Usage:
    ledgerkit check [journal] [--decimal-mark {.,,}]
    ledgerkit import <file> [--output PATH] [--journal PATH] [--no-history]
                            [--date-format F] [--decimal-separator {auto,comma,period}]
                            [--config PATH]
"""
