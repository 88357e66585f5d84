from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def series_frame(series: Sequence[Tuple[str, int]]) -> pd.DataFrame:
    return pd.DataFrame([{"name": label, "count": count} for label, count in series], columns=["name", "count"])


def bar_chart(series: Sequence[Tuple[str, int]], *, title: str, color: str, height: int = 300) -> alt.Chart:
    """Bar chart of a (label, count) series; bars keep the series order."""
    frame = series_frame(series)
    order: List[str] = frame["name"].tolist()
    return (
        alt.Chart(frame, title=title)
        .mark_bar(color=color)
        .encode(
            x=alt.X("name:N", title=None, sort=order, axis=alt.Axis(labelAngle=-25)),
            y=alt.Y("count:Q", title="Count", axis=alt.Axis(format="d", tickMinStep=1)),
            tooltip=["name", alt.Tooltip("count:Q", format=",")],
        )
        .properties(height=height)
    )
