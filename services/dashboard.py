# services/dashboard.py

from __future__ import annotations

import json
from typing import Any, Dict, List

import plotly.graph_objects as go

from models.keyword_models import GenerationStats

INTENT_COLORS: List[str] = ["#3b82f6", "#8b5cf6", "#ec4899", "#10b981"]
TYPE_BAR_COLOR = "#6366f1"


def intent_color(index: int) -> str:
    return INTENT_COLORS[index % len(INTENT_COLORS)]


def build_intent_chart(stats: GenerationStats) -> go.Figure:
    """検索意図の分布をドーナツチャートにする（色は分布の並び順で割り当て）。"""
    dist = stats.intent_distribution
    fig = go.Figure(
        go.Pie(
            labels=[f"{item.name} ({item.count})" for item in dist],
            values=[item.count for item in dist],
            hole=0.6,
            marker_colors=[intent_color(i) for i in range(len(dist))],
            sort=False,
            direction="clockwise",
            textinfo="none",
            hovertemplate="<b>%{label}</b><br>Keywords: %{value}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Search Intent Distribution",
        height=320,
        legend={"orientation": "h"},
    )
    return fig


def build_type_chart(stats: GenerationStats) -> go.Figure:
    """キーワード種別の分布を横棒グラフにする。"""
    dist = stats.type_distribution
    fig = go.Figure(
        go.Bar(
            x=[item.count for item in dist],
            y=[item.name for item in dist],
            orientation="h",
            marker_color=TYPE_BAR_COLOR,
            hovertemplate="<b>%{y}</b><br>Keywords: %{x}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Keyword Types",
        height=320,
        xaxis={"visible": False},
        yaxis={"autorange": "reversed"},
    )
    return fig


def build_dashboard(stats: GenerationStats) -> Dict[str, Any]:
    """2つのチャートを plotly の JSON としてまとめて返す（フロント側で Plotly.newPlot する想定）。"""
    return {
        "intent_chart": json.loads(build_intent_chart(stats).to_json()),
        "type_chart": json.loads(build_type_chart(stats).to_json()),
    }
