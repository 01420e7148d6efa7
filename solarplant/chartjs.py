"""Chart.js chart definitions for the hourly dashboard charts."""

from __future__ import annotations

from dataclasses import dataclass, field, replace

from solarplant.convert import round_float

NO_OF_HOURS = 24
COLOR_YELLOW = "#ffc107d4"
COLOR_RED = "#f44336d4"


@dataclass(frozen=True)
class ChartScaleTitle:
    display: bool = False
    text: str = ""
    color: str = ""

    def to_dict(self) -> dict:
        out: dict = {"display": self.display, "text": self.text}
        if self.color:
            out["color"] = self.color
        return out


@dataclass(frozen=True)
class ChartScale:
    type: str = "linear"
    display: bool = True
    position: str = "left"
    title: ChartScaleTitle = field(default_factory=ChartScaleTitle)
    min: float | None = None
    max: float | None = None

    def with_title(self, title: str) -> ChartScale:
        """A copy with the title text replaced."""
        return replace(self, title=replace(self.title, text=title))

    def with_min_and_max(self, low: float, high: float) -> ChartScale:
        """A copy with fixed axis bounds."""
        return replace(self, min=low, max=high)

    def to_dict(self) -> dict:
        out: dict = {"type": self.type, "display": self.display, "position": self.position}
        if self.min is not None:
            out["min"] = self.min
        if self.max is not None:
            out["max"] = self.max
        out["title"] = self.title.to_dict()
        return out


@dataclass
class ChartDataset:
    data: list[float | None] = field(default_factory=list)
    border_width: int = 1
    tension: float = 0.4
    fill: bool = True
    border_color: str = ""
    y_axis_id: str = ""

    def to_dict(self) -> dict:
        out: dict = {}
        if self.data:
            out["data"] = list(self.data)
        out.update(
            borderWidth=self.border_width,
            tension=self.tension,
            fill=self.fill,
            borderColor=self.border_color,
        )
        if self.y_axis_id:
            out["yAxisID"] = self.y_axis_id
        return out


@dataclass
class Chart:
    type: str = "line"
    labels: list[str] = field(default_factory=list)
    datasets: list[ChartDataset] = field(default_factory=list)
    responsive: bool = True
    legend_display: bool = False
    title: str = ""
    scales: dict[str, ChartScale] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """The chart as Chart.js configuration, ready for JSON encoding."""
        return {
            "type": self.type,
            "data": {
                "labels": list(self.labels),
                "datasets": [d.to_dict() for d in self.datasets],
            },
            "options": {
                "responsive": self.responsive,
                "plugins": {
                    "legend": {"display": self.legend_display},
                    "title": {"display": bool(self.title), "text": self.title},
                },
                "scales": {k: v.to_dict() for k, v in sorted(self.scales.items())},
            },
        }


def new_chart(title: str = "") -> Chart:
    """A two-axis line chart with one empty data point per hour of the day."""
    return Chart(
        labels=[f"{hour:02d}:00" for hour in range(NO_OF_HOURS)],
        datasets=[
            ChartDataset(
                data=[None] * NO_OF_HOURS, border_color=COLOR_YELLOW, y_axis_id="YAxis1"
            ),
            ChartDataset(
                data=[None] * NO_OF_HOURS, border_color=COLOR_RED, y_axis_id="YAxis2"
            ),
        ],
        title=title,
        scales={
            "YAxis1": ChartScale(
                position="left", title=ChartScaleTitle(display=True, color=COLOR_YELLOW)
            ),
            "YAxis2": ChartScale(
                position="right", title=ChartScaleTitle(display=True, color=COLOR_RED)
            ),
        },
    )


def fixed_float(num: float, precision: int) -> float:
    """``num`` rounded to ``precision`` decimals, halves away from zero."""
    return round_float(num, precision)