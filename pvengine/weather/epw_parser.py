"""Weather file parsing utilities (EnergyPlus EPW and generic CSV)."""

import csv
import io
import logging

import numpy as np

from pvengine.errors import ClimateParseError

from .climate import HOURS_PER_YEAR, ClimateRecord

logger = logging.getLogger(__name__)

# EPW data-row column indices
_EPW_DRY_BULB = 6
_EPW_RELATIVE_HUMIDITY = 8
_EPW_GLOBAL_HORIZONTAL = 13
_EPW_MIN_COLUMNS = 21

# LOCATION,city,state,country,source,WMO,latitude,longitude,tz,elevation
_EPW_LOCATION_LATITUDE = 6


def _is_int(text: str) -> bool:
    try:
        int(text)
    except ValueError:
        return False
    return True


def parse_epw(epw_text: str) -> ClimateRecord:
    """Parse an EnergyPlus weather file into a ClimateRecord.

    Header lines are skipped; data rows are recognised by having more
    than 20 columns and integer year, month and day fields.  Rows whose
    temperature, humidity or irradiance do not parse are dropped.  The
    latitude is read from the ``LOCATION`` header when present.

    Raises
    ------
    ClimateParseError
        If fewer than 8760 usable hourly rows are found.
    """
    latitude = 0.0
    temp, hum, ghi = [], [], []

    for line in epw_text.splitlines():
        cols = line.split(",")
        if cols[0].strip().upper() == "LOCATION" and len(cols) > _EPW_LOCATION_LATITUDE:
            try:
                latitude = float(cols[_EPW_LOCATION_LATITUDE])
            except ValueError:
                logger.warning("EPW LOCATION header has no numeric latitude")
            continue

        if len(cols) < _EPW_MIN_COLUMNS:
            continue
        if not (_is_int(cols[0]) and _is_int(cols[1]) and _is_int(cols[2])):
            continue
        try:
            t = float(cols[_EPW_DRY_BULB])
            h = float(cols[_EPW_RELATIVE_HUMIDITY])
            g = float(cols[_EPW_GLOBAL_HORIZONTAL])
        except ValueError:
            continue
        temp.append(t)
        hum.append(h)
        ghi.append(g)

    n = len(temp)
    if n < HOURS_PER_YEAR:
        raise ClimateParseError(
            f"Insufficient data: got {n} hourly records, need {HOURS_PER_YEAR}"
        )
    if n > HOURS_PER_YEAR:
        logger.info("EPW has %d hourly records, keeping the first %d", n, HOURS_PER_YEAR)

    record = ClimateRecord(
        temperature=np.array(temp[:HOURS_PER_YEAR], dtype=np.float64),
        irradiance=np.array(ghi[:HOURS_PER_YEAR], dtype=np.float64),
        humidity=np.array(hum[:HOURS_PER_YEAR], dtype=np.float64),
        latitude=latitude,
        source="epw",
    )
    record.validate()
    return record


_CSV_FIELDS = ("temperature", "ghi", "humidity")


def parse_generic_csv(
    csv_text: str,
    column_map: dict[str, str] | None = None,
    latitude: float = 0.0,
) -> ClimateRecord:
    """Read hourly temperature, GHI and humidity from a headed CSV.

    ``column_map`` renames the expected ``temperature``/``ghi``/``humidity``
    headers to whatever the file uses.  Non-numeric rows are skipped.
    """
    headers = {field: (column_map or {}).get(field, field) for field in _CSV_FIELDS}

    reader = csv.DictReader(io.StringIO(csv_text))
    missing = [h for h in headers.values() if h not in (reader.fieldnames or [])]
    if missing:
        raise ClimateParseError(f"CSV is missing column(s): {', '.join(missing)}")

    columns: dict[str, list[float]] = {field: [] for field in _CSV_FIELDS}
    for row in reader:
        try:
            values = [float(row[headers[field]]) for field in _CSV_FIELDS]
        except (ValueError, TypeError):
            continue
        for field, value in zip(_CSV_FIELDS, values):
            columns[field].append(value)

    n = len(columns["ghi"])
    if n < HOURS_PER_YEAR:
        raise ClimateParseError(f"CSV has {n} usable hourly rows, need {HOURS_PER_YEAR}")

    record = ClimateRecord(
        temperature=np.array(columns["temperature"][:HOURS_PER_YEAR], dtype=np.float64),
        irradiance=np.array(columns["ghi"][:HOURS_PER_YEAR], dtype=np.float64),
        humidity=np.array(columns["humidity"][:HOURS_PER_YEAR], dtype=np.float64),
        latitude=latitude,
        source="csv",
    )
    record.validate()
    return record
