"""
Map Visualization Module for Conecta Rua

Generates interactive Leaflet maps using Folium, one colored marker per
report, with a popup summary. Clicking a marker opens the report's detail page.
"""

import html
import logging
from typing import Callable, List, Optional, Sequence

import folium
from jinja2 import Template

from conecta_rua.core.config import settings
from conecta_rua.core.constants import (
    CATEGORY_COLORS,
    CATEGORY_LABELS,
    OSM_ATTRIBUTION,
    OSM_TILES_URL,
    get_category_color,
)
from conecta_rua.reports.models import Report

logger = logging.getLogger(__name__)

MARKER_SIZE = 24

# folium places popup and tooltip HTML inside JavaScript template literals
_TEMPLATE_LITERAL_ENTITIES = str.maketrans({"`": "&#96;", "$": "&#36;", "\\": "&#92;"})


def escape_text(value: str) -> str:
    """Escape user text for Leaflet popups and tooltips."""
    return html.escape(value, quote=True).translate(_TEMPLATE_LITERAL_ENTITIES)


def create_marker_icon(category: str) -> folium.DivIcon:
    """Round marker filled with the category color."""
    color = get_category_color(category)
    icon_html = f"""
    <div style="
        background-color: {color};
        width: {MARKER_SIZE}px;
        height: {MARKER_SIZE}px;
        border-radius: 50%;
        border: 3px solid white;
        box-shadow: 0 2px 4px rgba(0,0,0,0.3);
        display: flex;
        align-items: center;
        justify-content: center;
    ">
        <div style="width: 8px; height: 8px; background-color: white; border-radius: 50%;"></div>
    </div>
    """
    return folium.DivIcon(
        html=icon_html,
        class_name="custom-marker",
        icon_size=(MARKER_SIZE, MARKER_SIZE),
        icon_anchor=(MARKER_SIZE // 2, MARKER_SIZE // 2),
        popup_anchor=(0, -MARKER_SIZE // 2),
    )


def build_popup_html(report: Report, detail_url: Optional[str] = None) -> str:
    """Popup summary: title, category, description, first photo and author."""
    image_html = ""
    if report.first_image:
        image_html = (
            f'<img src="{escape_text(report.first_image)}" alt="Foto do problema" '
            f'style="width: 100%; height: 80px; object-fit: cover; border-radius: 4px; margin-top: 8px;">'
        )

    link_html = ""
    if detail_url:
        link_html = (
            f'<p style="margin: 6px 0 0 0;"><a href="{escape_text(detail_url)}" '
            f'target="_top">Ver detalhes</a></p>'
        )

    return f"""
    <div style="font-family: Arial; min-width: 200px; padding: 4px;">
        <h3 style="margin: 0 0 4px 0; font-size: 14px;">{escape_text(report.title)}</h3>
        <p style="margin: 0 0 8px 0; font-size: 12px; color: #6b7280;">{escape_text(report.category_label)}</p>
        <p style="margin: 0; font-size: 12px;">{escape_text(report.description)}</p>
        {image_html}
        <p style="margin: 4px 0 0 0; font-size: 12px; color: #6b7280;">Por: {escape_text(report.user_name)}</p>
        {link_html}
    </div>
    """


class MarkerClickLink(folium.MacroElement):
    """Sends the top window to ``url`` when the parent marker is clicked."""

    _template = Template("""
        {% macro script(this, kwargs) %}
            {{ this._parent.get_name() }}.on("click", function() {
                window.top.location.href = {{ this.url|tojson }};
            });
        {% endmacro %}
    """)

    def __init__(self, url: str):
        super().__init__()
        self._name = "MarkerClickLink"
        self.url = url


def _legend_html() -> str:
    rows = "".join(
        f'<span style="color: {CATEGORY_COLORS[category]};">●</span> {label}<br>'
        for category, label in CATEGORY_LABELS.items()
    )
    return f'''
    <div style="position: fixed;
                bottom: 30px; right: 30px;
                background-color: rgba(255,255,255,0.9);
                padding: 10px;
                border-radius: 5px;
                z-index: 9999;
                font-family: Arial;
                font-size: 12px;">
        <b>Categorias</b><br>
        {rows}
    </div>
    '''


def create_report_map(
    reports: Sequence[Report],
    center: Optional[tuple[float, float]] = None,
    zoom: Optional[int] = None,
    detail_url: Optional[Callable[[Report], str]] = None,
    show_legend: bool = True,
) -> folium.Map:
    """
    Create an interactive map with one marker per report.

    The viewport is static configuration (city center and zoom), never
    computed from the reports.

    Args:
        reports: Reports to display (already filtered)
        center: Map center (lat, lon), Ponta Grossa by default
        zoom: Initial zoom level (1-18)
        detail_url: Builds the popup's detail link for a report
        show_legend: Include the category legend

    Returns:
        Folium Map object
    """
    center = center or (settings.default_latitude, settings.default_longitude)
    zoom = zoom or settings.map_zoom

    report_map = folium.Map(location=center, zoom_start=zoom, tiles=None)

    folium.TileLayer(
        tiles=OSM_TILES_URL,
        attr=OSM_ATTRIBUTION,
        name="OpenStreetMap",
    ).add_to(report_map)

    marker_group = folium.FeatureGroup(name="Denúncias")

    for report in reports:
        url = detail_url(report) if detail_url else None
        marker = folium.Marker(
            location=[report.latitude, report.longitude],
            icon=create_marker_icon(report.category),
            popup=folium.Popup(build_popup_html(report, url), max_width=300),
            tooltip=folium.Tooltip(escape_text(report.title)),
        )
        if url:
            marker.add_child(MarkerClickLink(url))
        marker.add_to(marker_group)

    marker_group.add_to(report_map)

    if show_legend:
        report_map.get_root().html.add_child(folium.Element(_legend_html()))

    logger.info(f"Created map with {len(reports)} reports")
    return report_map


class ReportMapView:
    """
    Map bound to a filtered report list.

    ``detail_url`` maps a report to its detail page; markers link there on
    click and from their popup.
    """

    def __init__(
        self,
        reports: Sequence[Report],
        detail_url: Optional[Callable[[Report], str]] = None,
    ):
        self.reports: List[Report] = list(reports)
        self.detail_url = detail_url

    def build(self) -> folium.Map:
        return create_report_map(self.reports, detail_url=self.detail_url)

    def render(self) -> str:
        """Embeddable HTML (an iframe) for the map."""
        return self.build()._repr_html_()

    def render_page(self) -> str:
        """Standalone HTML document for the map."""
        return self.build().get_root().render()


def save_report_map(
    reports: Sequence[Report],
    output_path: str = "conecta_rua_map.html",
) -> str:
    """
    Generate and save the report map as a standalone HTML file.

    Args:
        reports: Reports to display
        output_path: Path to save HTML file

    Returns:
        Path to saved file
    """
    report_map = create_report_map(reports)
    report_map.save(output_path)
    logger.info(f"Map saved to {output_path}")

    return output_path
