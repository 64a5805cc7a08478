import csv
import io

from swimtrack.helpers.rankings import field
from swimtrack.helpers.time import parse_date

CSV_COLUMNS = (
    "swimmer_name",
    "pool_length",
    "date",
    "style",
    "distance",
    "total_time",
    "competition_name",
)


def records_to_csv(rows) -> str:
    """
    Render record rows as CSV in the fixed export column order.
    Quoting is left to the csv module so commas/quotes in names round-trip.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)

    for r in rows:
        day = parse_date(field(r, "date"))
        writer.writerow(
            [
                field(r, "athlete_name") or "",
                field(r, "pool_length"),
                day.isoformat() if day else "",
                field(r, "style"),
                field(r, "distance"),
                field(r, "time"),
                field(r, "competition_name") or "",
            ]
        )

    return buf.getvalue()
