"""
Visualization module for the Chemical Release Footprint Estimator.

Provides Plotly-based interactive plots for the Streamlit interface.
"""

import numpy as np
import plotly.graph_objects as go
from plotly.subplots import make_subplots

from config import CONCENTRATION_THRESHOLD, PLUME_HALF_WIDTH_SIGMAS
from models.geometry import PlumeExtent, rotate_offsets, wind_rotation_angle


def create_footprint_map(feature: dict, zoom: float = 9.0) -> go.Figure:
    """Draw a prediction Feature's polygon and source point on a tile map."""
    ring = feature["geometry"]["coordinates"][0]
    lons = [p[0] for p in ring]
    lats = [p[1] for p in ring]
    props = feature.get("properties", {})
    chemical = props.get("chemical", {}).get("name", "Release")

    fig = go.Figure()
    fig.add_trace(
        go.Scattermap(
            lon=lons,
            lat=lats,
            mode="lines",
            fill="toself",
            fillcolor="rgba(255,140,0,0.35)",
            line=dict(color="darkorange", width=2),
            name=f"{chemical} footprint",
            hoverinfo="name",
        )
    )
    # First ring vertex is the source
    fig.add_trace(
        go.Scattermap(
            lon=[lons[0]],
            lat=[lats[0]],
            mode="markers",
            marker=dict(size=12, color="red"),
            name="Source",
            hovertemplate="Source<br>%{lat:.4f}, %{lon:.4f}<extra></extra>",
        )
    )

    fig.update_layout(
        map=dict(
            style="open-street-map",
            center=dict(lon=lons[0], lat=lats[0]),
            zoom=zoom,
        ),
        height=600,
        margin=dict(l=0, r=0, t=30, b=0),
        legend=dict(orientation="h", yanchor="bottom", y=0.01, xanchor="left", x=0.01),
    )
    return fig


def create_centerline_profile(
    extent: PlumeExtent,
    threshold: float = CONCENTRATION_THRESHOLD,
) -> go.Figure:
    """Plot centerline concentration and sigma-y / sigma-z against downwind distance."""
    if not extent.samples:
        fig = go.Figure()
        fig.add_annotation(text="No plume samples available", showarrow=False)
        return fig

    distances = [s.distance_m for s in extent.samples]
    concs = [max(s.concentration, 1e-30) for s in extent.samples]
    sigma_y = [s.sigma_y for s in extent.samples]
    sigma_z = [s.sigma_z for s in extent.samples]

    fig = make_subplots(
        rows=2, cols=1,
        shared_xaxes=True,
        vertical_spacing=0.08,
        subplot_titles=("Centerline Concentration", "Dispersion Coefficients"),
    )

    fig.add_trace(
        go.Scatter(
            x=distances, y=concs,
            mode="lines",
            line=dict(color="orange", width=2),
            name="Concentration",
            hovertemplate="x: %{x:.0f}m<br>C: %{y:.3e}<extra></extra>",
        ),
        row=1, col=1,
    )
    fig.add_hline(
        y=threshold, line=dict(color="red", dash="dash", width=1),
        annotation_text="threshold", row=1, col=1,
    )

    fig.add_trace(
        go.Scatter(
            x=distances, y=sigma_y,
            mode="lines", line=dict(color="deepskyblue", width=2),
            name="sigma_y",
        ),
        row=2, col=1,
    )
    fig.add_trace(
        go.Scatter(
            x=distances, y=sigma_z,
            mode="lines", line=dict(color="lime", width=2),
            name="sigma_z",
        ),
        row=2, col=1,
    )

    fig.update_yaxes(type="log", title_text="Concentration", row=1, col=1)
    fig.update_yaxes(title_text="Sigma (m)", row=2, col=1)
    fig.update_xaxes(title_text="Downwind distance (m)", row=2, col=1)
    fig.update_layout(
        height=550,
        template="plotly_dark",
        margin=dict(l=60, r=30, t=50, b=50),
    )
    return fig


def _add_compass_rose(
    fig: go.Figure,
    wind_speed: float,
    wind_direction_deg: float,
    center: tuple,
    outer_r: float,
):
    """Add a compass rose with cardinal labels and a wind-direction needle."""
    cx, cy = center

    fig.add_shape(
        type="circle",
        x0=cx - outer_r, y0=cy - outer_r,
        x1=cx + outer_r, y1=cy + outer_r,
        line=dict(color="rgba(255,255,255,0.35)", width=1.5),
        fillcolor="rgba(14,17,23,0.6)",
    )

    cardinals = {"N": 0, "E": 90, "S": 180, "W": 270}
    for label, deg in cardinals.items():
        rad = np.radians(deg)
        fig.add_annotation(
            x=cx + 0.7 * outer_r * np.sin(rad),
            y=cy + 0.7 * outer_r * np.cos(rad),
            text=label,
            showarrow=False,
            font=dict(size=9, color="white"),
        )

    # Needle points toward the blowing direction
    toward_rad = np.radians((wind_direction_deg + 180.0) % 360.0)
    arrow_len = 0.55 * outer_r
    fig.add_annotation(
        x=cx + arrow_len * np.sin(toward_rad),
        y=cy + arrow_len * np.cos(toward_rad),
        ax=cx, ay=cy,
        axref="x", ayref="y",
        showarrow=True,
        arrowhead=3,
        arrowsize=1.5,
        arrowwidth=3,
        arrowcolor="deepskyblue",
    )

    fig.add_annotation(
        x=cx, y=cy - outer_r * 1.25,
        text=f"{wind_speed:.1f} m/s | {wind_direction_deg:.0f}°",
        showarrow=False,
        font=dict(size=9, color="deepskyblue"),
    )


def create_local_footprint_figure(
    extent: PlumeExtent,
    wind_speed: float,
    wind_direction_deg: float,
    half_width_sigmas: float = PLUME_HALF_WIDTH_SIGMAS,
) -> go.Figure:
    """Draw the plume envelope in East/North meters around the source."""
    fig = go.Figure()
    if not extent.samples:
        fig.add_annotation(text="No plume samples available", showarrow=False)
        return fig

    distances = np.array([s.distance_m for s in extent.samples])
    half_widths = np.array([s.sigma_y for s in extent.samples]) * half_width_sigmas
    local_x = np.concatenate([[0.0], distances, distances[::-1], [0.0]])
    local_y = np.concatenate([[0.0], half_widths, -half_widths[::-1], [0.0]])

    angle = wind_rotation_angle(wind_direction_deg)
    east, north = rotate_offsets(local_x, local_y, angle)
    center_e, center_n = rotate_offsets(distances, np.zeros_like(distances), angle)

    fig.add_trace(
        go.Scatter(
            x=east, y=north,
            mode="lines",
            fill="toself",
            fillcolor="rgba(255,140,0,0.35)",
            line=dict(color="darkorange", width=2),
            name="Footprint",
            hoverinfo="skip",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=center_e, y=center_n,
            mode="lines",
            line=dict(color="white", width=1, dash="dot"),
            name="Centerline",
            customdata=[s.concentration for s in extent.samples],
            hovertemplate="E: %{x:.0f}m<br>N: %{y:.0f}m<br>C: %{customdata:.3e}<extra></extra>",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[0.0], y=[0.0],
            mode="markers",
            marker=dict(size=12, color="red", symbol="diamond",
                        line=dict(width=1, color="black")),
            name="Source",
        )
    )

    reach = max(float(np.max(np.abs(np.concatenate([east, north])))), 100.0)
    _add_compass_rose(
        fig, wind_speed, wind_direction_deg,
        center=(-0.8 * reach, 0.8 * reach), outer_r=0.12 * reach,
    )

    fig.update_layout(
        height=600,
        template="plotly_dark",
        margin=dict(l=60, r=30, t=40, b=60),
        legend=dict(orientation="h", yanchor="bottom", y=-0.15, xanchor="center", x=0.5),
    )
    fig.update_xaxes(title_text="East (m)", range=[-reach * 1.05, reach * 1.05])
    fig.update_yaxes(
        title_text="North (m)", range=[-reach * 1.05, reach * 1.05],
        scaleanchor="x", scaleratio=1,
    )
    return fig
