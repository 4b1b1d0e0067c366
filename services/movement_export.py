# services/movement_export.py
from io import BytesIO
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font

from models import CrewMember, Movement, SIGN_ON

HEADER = [
    "Vessel", "Rank", "Sign On", "Sign On Port", "Sign Off", "Sign Off Port", "Promoted",
]


def movement_history_rows(movements: List[Movement]) -> List[list]:
    """One row per voyage: sign-on paired with its sign-off (if any)"""
    rows = []
    for m in movements:
        if m.transaction_type != SIGN_ON:
            continue
        off = m.sign_off
        rows.append([
            m.vessel.name if m.vessel else m.vessel_id,
            m.rank.name if m.rank else m.rank_id,
            m.transaction_date,
            m.port.name if m.port else None,
            off.transaction_date if off else None,
            off.port.name if off and off.port else None,
            m.promoted_at,
        ])
    return rows


def build_movement_workbook(crew: CrewMember, movements: List[Movement]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Movement History"

    ws.append([f"{crew.crew_code} - {crew.full_name}"])
    ws["A1"].font = Font(bold=True, size=12)
    ws.append([])
    ws.append(HEADER)
    for cell in ws[3]:
        cell.font = Font(bold=True)

    for row in movement_history_rows(movements):
        ws.append(row)

    for col in ("C", "E", "G"):
        for cell in ws[col][3:]:
            cell.number_format = "yyyy-mm-dd"

    buf = BytesIO()
    wb.save(buf)
    return buf.getvalue()
