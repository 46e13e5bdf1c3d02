from __future__ import annotations
from typing import Any, Mapping

from .models.layout import FieldKind, RecordLayout


def plot_layout(layout: RecordLayout, values: Mapping[str, Any] | None = None, *, show: bool = True):
    """Bit-span chart of a record layout, one row per byte of the wire image.

    String payload sizes come from ``values`` when given, otherwise only the
    32-bit length prefix is drawn.
    """
    import matplotlib.pyplot as plt

    spans = []
    pos = 0
    for f in layout.fields:
        if f.kind is FieldKind.STRING and values is not None and f.name in values:
            n = f.value_bits(values[f.name])
        else:
            n = f.wire_bits if f.wire_bits is not None else 32
        spans.append((f.name, pos, n))
        pos += n

    rows = max(1, (pos + 7) // 8)
    fig, ax = plt.subplots(figsize=(8, max(2.0, rows * 0.35)))
    colors = plt.rcParams["axes.prop_cycle"].by_key()["color"]
    for i, (name, start, n) in enumerate(spans):
        color = colors[i % len(colors)]
        bit = start
        while bit < start + n:
            row, col = divmod(bit, 8)
            width = min(8 - col, start + n - bit)
            ax.broken_barh([(col, width)], (row - 0.4, 0.8), facecolors=color, edgecolors="black")
            bit += width
        row, col = divmod(start, 8)
        ax.text(col + 0.1, row, name, va="center", fontsize=7)

    ax.set_xlim(0, 8)
    ax.set_ylim(rows - 0.5, -0.5)
    ax.set_xlabel("bit within byte (LSB first)")
    ax.set_ylabel("byte")
    ax.set_title(f"{layout.name}: {pos} bits")
    if show:
        plt.show()
    return fig
