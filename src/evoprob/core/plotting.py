"""Plot hook invocation.

The driver decides when to plot (typically once per generation with the best
candidate); this module only calls the hook with an explicit rendering
context and keeps its failures from reaching the search loop.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

import numpy as np

from .logging import get_logger
from .types import EvaluationState

log = get_logger(__name__)


@dataclass(frozen=True)
class PlotContext:
    """Rendering context passed to plot hooks.

    Attributes:
        figure_id: Identifier of the figure/canvas the hook draws into.
        title: Optional title for the figure.
        outdir: Optional directory for rendered artifacts.
        options: Free-form hook options.
    """

    figure_id: int | str = 1
    title: str = ""
    outdir: Optional[Path] = None
    options: Mapping[str, Any] = field(default_factory=dict)


def invoke_plot(
    plot_func: Optional[Callable[..., Any]],
    x: Any,
    state: EvaluationState,
    context: PlotContext,
) -> bool:
    """Call plot_func(x, state, context); never raises on hook failure.

    Returns:
        True if the hook ran to completion, False if it is absent or failed.
    """
    if plot_func is None:
        return False

    try:
        x_arr = np.array(x, dtype=np.float64).reshape(-1)
        plot_func(x_arr, state, context)
    except Exception as exc:  # noqa: BLE001 - plot failures must not abort the run
        log.error(
            "plot hook failed",
            exc=exc,
            gen_id=state.gen_id,
            pop_id=state.pop_id,
            figure_id=context.figure_id,
        )
        return False
    return True
