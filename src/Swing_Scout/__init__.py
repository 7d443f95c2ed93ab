"""Swing Scout: upside swing-setup screener for US equities."""

__version__ = "0.1.0"
