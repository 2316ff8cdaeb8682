"""
Conecta Rua - Visualization Module
Interactive report maps.
"""

from conecta_rua.visualization.map_generator import (
    ReportMapView,
    create_report_map,
    save_report_map,
)

__all__ = [
    "ReportMapView",
    "create_report_map",
    "save_report_map",
]
