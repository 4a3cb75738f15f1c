from __future__ import annotations

import io
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

import matplotlib
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, Rectangle

# SVG user units are points; at 72 dpi one canvas pixel maps to one SVG unit.
SVG_DPI = 72.0
MPL_VERTICAL_ALIGN = {'top': 'top', 'middle': 'center', 'bottom': 'bottom', 'alphabetic': 'baseline'}
SVG_RC = {'svg.fonttype': 'none', 'svg.hashsalt': 'period-narrator'}


class DrawingSurface(Protocol):
    def clear(self, width: float, height: float) -> None: ...

    def fill_rect(self, x: float, y: float, width: float, height: float, *, color: str) -> None: ...

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: str, width: float) -> None: ...

    def polyline(
        self,
        points: Sequence[tuple[float, float]],
        *,
        color: str,
        width: float,
        dash: Sequence[float] = (),
    ) -> None: ...

    def circle(self, x: float, y: float, radius: float, *, color: str) -> None: ...

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        color: str,
        font: str,
        align: str = 'center',
        baseline: str = 'top',
    ) -> None: ...


@dataclass(frozen=True, slots=True)
class DrawCommand:
    op: str
    params: dict[str, Any]

    def as_dict(self) -> dict[str, Any]:
        return {'op': self.op, **self.params}


@dataclass(slots=True)
class RecordingSurface:
    """Keeps every draw call in order so a client canvas can replay it."""

    commands: list[DrawCommand] = field(default_factory=list)

    def clear(self, width: float, height: float) -> None:
        self.commands.clear()
        self.commands.append(DrawCommand('clear', {'width': width, 'height': height}))

    def fill_rect(self, x: float, y: float, width: float, height: float, *, color: str) -> None:
        self.commands.append(
            DrawCommand('fill_rect', {'x': x, 'y': y, 'width': width, 'height': height, 'color': color})
        )

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: str, width: float) -> None:
        self.commands.append(
            DrawCommand('line', {'x1': x1, 'y1': y1, 'x2': x2, 'y2': y2, 'color': color, 'width': width})
        )

    def polyline(
        self,
        points: Sequence[tuple[float, float]],
        *,
        color: str,
        width: float,
        dash: Sequence[float] = (),
    ) -> None:
        self.commands.append(
            DrawCommand(
                'polyline',
                {
                    'points': [[x, y] for x, y in points],
                    'color': color,
                    'width': width,
                    'dash': list(dash),
                },
            )
        )

    def circle(self, x: float, y: float, radius: float, *, color: str) -> None:
        self.commands.append(DrawCommand('circle', {'x': x, 'y': y, 'radius': radius, 'color': color}))

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        color: str,
        font: str,
        align: str = 'center',
        baseline: str = 'top',
    ) -> None:
        self.commands.append(
            DrawCommand(
                'text',
                {'x': x, 'y': y, 'value': value, 'color': color, 'font': font, 'align': align, 'baseline': baseline},
            )
        )

    def ops(self) -> list[str]:
        return [command.op for command in self.commands]

    def as_dicts(self) -> list[dict[str, Any]]:
        return [command.as_dict() for command in self.commands]


def css_font_properties(font: str) -> dict[str, Any]:
    """Translate a canvas font shorthand such as 'bold 11px sans-serif'."""
    props: dict[str, Any] = {'fontsize': 10.0, 'fontweight': 'normal', 'family': 'sans-serif'}
    for token in font.split():
        lowered = token.lower()
        if lowered in {'bold', 'bolder', 'normal', 'light', 'lighter'}:
            props['fontweight'] = lowered
        elif lowered.endswith('px'):
            try:
                props['fontsize'] = float(lowered[:-2])
            except ValueError:
                continue
        elif lowered.isalpha() or '-' in lowered:
            props['family'] = token
    return props


@dataclass(slots=True)
class SvgSurface:
    """Draws onto a matplotlib figure whose data coordinates are canvas pixels."""

    width: float = 0.0
    height: float = 0.0
    figure: Figure | None = None
    axes: Axes | None = None

    def clear(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self.figure = Figure(figsize=(width / SVG_DPI, height / SVG_DPI), dpi=SVG_DPI)
        self.axes = self.figure.add_axes((0.0, 0.0, 1.0, 1.0))
        self.axes.set_xlim(0, width)
        self.axes.set_ylim(height, 0)
        self.axes.set_axis_off()

    def _require_axes(self) -> Axes:
        if self.axes is None:
            raise RuntimeError('SvgSurface.clear() must be called before drawing')
        return self.axes

    def fill_rect(self, x: float, y: float, width: float, height: float, *, color: str) -> None:
        self._require_axes().add_patch(Rectangle((x, y), width, height, facecolor=color, edgecolor='none', linewidth=0))

    def line(self, x1: float, y1: float, x2: float, y2: float, *, color: str, width: float) -> None:
        self._require_axes().add_line(Line2D([x1, x2], [y1, y2], color=color, linewidth=width))

    def polyline(
        self,
        points: Sequence[tuple[float, float]],
        *,
        color: str,
        width: float,
        dash: Sequence[float] = (),
    ) -> None:
        if not points:
            return
        linestyle: Any = '-'
        if dash and width > 0:
            # matplotlib scales dash lengths by the line width
            linestyle = (0, tuple(d / width for d in dash))
        self._require_axes().add_line(
            Line2D(
                [x for x, _ in points],
                [y for _, y in points],
                color=color,
                linewidth=width,
                linestyle=linestyle,
                solid_joinstyle='round',
                solid_capstyle='round',
            )
        )

    def circle(self, x: float, y: float, radius: float, *, color: str) -> None:
        self._require_axes().add_patch(Circle((x, y), radius, facecolor=color, edgecolor='none'))

    def text(
        self,
        x: float,
        y: float,
        value: str,
        *,
        color: str,
        font: str,
        align: str = 'center',
        baseline: str = 'top',
    ) -> None:
        self._require_axes().text(
            x,
            y,
            value,
            color=color,
            ha=align if align in {'left', 'center', 'right'} else 'center',
            va=MPL_VERTICAL_ALIGN.get(baseline, 'baseline'),
            **css_font_properties(font),
        )

    def to_svg(self) -> str:
        if self.figure is None:
            return ''
        buffer = io.BytesIO()
        with matplotlib.rc_context(SVG_RC):
            self.figure.savefig(buffer, format='svg', facecolor='none', metadata={'Date': None})
        return buffer.getvalue().decode('utf-8')
