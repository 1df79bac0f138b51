from datetime import datetime, timezone
from typing import Iterable, List, Mapping, Optional

import pandas as pd

from .models import StatisticPoint

DAYS_IN_MONTH_VIEW = 30
MONTHS_IN_YEAR_VIEW = 12


def progress_chart(
    rows: Iterable[Mapping], period: str = "month", now: Optional[datetime] = None
) -> List[StatisticPoint]:
    """Words mastered per bucket, oldest first.

    `month` gives one bucket per day for the last 30 days, `year` one per
    calendar month for the last 12 months. Empty buckets are zero.
    """
    if period not in ("month", "year"):
        raise ValueError(f"Unknown period {period!r}")

    today = pd.Timestamp(now or datetime.now(timezone.utc))
    if today.tzinfo is None:
        today = today.tz_localize("UTC")
    today = today.tz_convert("UTC").normalize()

    df = pd.DataFrame([dict(r) for r in rows], columns=["words_count", "created_at"])
    df["words_count"] = df["words_count"].astype("int64")
    created = pd.to_datetime(df["created_at"], utc=True, format="ISO8601")

    if period == "month":
        index = pd.date_range(end=today, periods=DAYS_IN_MONTH_VIEW, freq="D")
        totals = df.groupby(created.dt.normalize())["words_count"].sum()
        totals = totals.reindex(index, fill_value=0)
        return [
            StatisticPoint(label=day.strftime("%d.%m"), value=int(count))
            for day, count in totals.items()
        ]

    index = pd.period_range(
        end=today.tz_localize(None).to_period("M"), periods=MONTHS_IN_YEAR_VIEW, freq="M"
    )
    months = created.dt.tz_localize(None).dt.to_period("M")
    totals = df.groupby(months)["words_count"].sum()
    totals = totals.reindex(index, fill_value=0)
    return [
        StatisticPoint(label=month.strftime("%b %Y"), value=int(count))
        for month, count in totals.items()
    ]
