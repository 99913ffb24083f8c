"""
Reporting Module
Table builders and Excel / JSON export of an estimate.
"""

from .exporter import (
    build_concrete_df,
    build_masonry_df,
    build_finishes_df,
    build_steel_members_df,
    build_steel_diameters_df,
    build_summary_df,
    build_dqe_df,
    export_to_excel,
    export_to_json,
)

__all__ = [
    "build_concrete_df",
    "build_masonry_df",
    "build_finishes_df",
    "build_steel_members_df",
    "build_steel_diameters_df",
    "build_summary_df",
    "build_dqe_df",
    "export_to_excel",
    "export_to_json",
]
