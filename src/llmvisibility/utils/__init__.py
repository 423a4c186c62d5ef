"""Utility modules for LLM Visibility."""

from .data_prep import export_to_json, prepare_export, load_company_profile

__all__ = [
    "export_to_json",
    "prepare_export",
    "load_company_profile",
]
