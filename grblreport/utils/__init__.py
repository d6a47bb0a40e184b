"""Utility helpers for grblreport."""
