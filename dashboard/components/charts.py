"""
components/charts.py - Reusable Plotly chart builders for the dashboard.
"""

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

STATUS_COLORS = {
    "pending": "#94a3b8",
    "in_progress": "#f59e0b",
    "submitted": "#22c55e",
    "locked": "#3b82f6",
    "scheduled": "#6366f1",
    "done": "#10b981",
    "cancelled": "#ef4444",
}


def rankings_bar_chart(df: pd.DataFrame, label_col: str, title: str) -> go.Figure:
    """Horizontal bar chart of ranking percentages, best at the top."""
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=df["Percentage"], y=df[label_col], orientation="h",
        marker_color="#6366f1", text=df["Percentage"].round(2),
        textposition="outside", textfont=dict(size=13, color="#1e293b"),
    ))
    fig.update_layout(
        title=title,
        xaxis=dict(title="Percentage", range=[0, 105]),
        yaxis=dict(autorange="reversed"),
        height=max(300, 40 * len(df) + 100), margin=dict(l=120, r=40, t=50, b=40),
        showlegend=False, plot_bgcolor="white",
    )
    return fig


def status_pie_chart(df: pd.DataFrame, title: str) -> go.Figure:
    """Donut of counts keyed by status."""
    fig = px.pie(
        df, names="Status", values="Count", hole=0.45, title=title,
        color="Status", color_discrete_map=STATUS_COLORS,
    )
    fig.update_layout(height=320, margin=dict(t=50, b=20))
    return fig


def daily_activity_chart(df: pd.DataFrame) -> go.Figure:
    """Audit entries per day."""
    fig = px.bar(df, x="Day", y="Count", title="Audit Activity")
    fig.update_traces(marker_color="#0ea5e9")
    fig.update_layout(height=320, margin=dict(t=50, b=40), plot_bgcolor="white")
    return fig


def criterion_score_chart(df: pd.DataFrame) -> go.Figure:
    """Score per criterion against its max, with the min as a marker."""
    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["Criterion"], y=df["Max"], name="Max", marker_color="rgba(99,102,241,0.15)"))
    fig.add_trace(go.Bar(x=df["Criterion"], y=df["Score"], name="Score", marker_color="#6366f1"))
    fig.add_trace(go.Scatter(
        x=df["Criterion"], y=df["Min"], name="Min", mode="markers",
        marker=dict(symbol="line-ew-open", size=24, color="#ef4444"),
    ))
    fig.update_layout(
        title="Criterion Scores",
        barmode="overlay", height=380, xaxis=dict(tickangle=-30),
        margin=dict(t=50, b=80), plot_bgcolor="white",
    )
    return fig
