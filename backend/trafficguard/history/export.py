"""
History CSV Export

One row per scan record. Fields containing the delimiter, a quote or a
line break are quote-wrapped with embedded quotes doubled.
"""

import csv
import io
from datetime import date
from typing import List, Optional

from trafficguard.models import ScanRecord


CSV_HEADERS = [
    'Scan ID', 'Timestamp', 'Plate Number', 'Vehicle Type',
    'Owner', 'Risk Score', 'Total Fine', 'Status',
]


def _number(value: float):
    return int(value) if float(value).is_integer() else value


def record_row(record: ScanRecord) -> list:
    vehicle = record.vehicle
    analysis = record.analysis
    return [
        record.id,
        record.timestamp.strftime('%Y-%m-%d %H:%M:%S'),
        record.plate_number or 'N/A',
        vehicle.type if vehicle else 'N/A',
        vehicle.owner.name if vehicle and vehicle.owner.name else 'Unknown',
        analysis.risk_score if analysis else 0,
        _number(analysis.total_fine) if analysis else 0,
        record.status.value,
    ]


def export_history_csv(records: List[ScanRecord]) -> str:
    """Render records as CSV text (header row always present)"""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')

    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(record_row(record))

    return output.getvalue()


def export_filename(today: Optional[date] = None) -> str:
    """``traffic_report_<YYYY-MM-DD>.csv``"""
    return f"traffic_report_{(today or date.today()).isoformat()}.csv"
