from __future__ import annotations

from typing import Any, Dict

import altair as alt

# Ledgers for busy accounts can exceed Altair's default 5000-row guard.
alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.TopLevelMixin) -> Dict[str, Any]:
    """Serialise an Altair chart to a Vega-Lite dict for JSON payloads."""
    return chart.to_dict()
