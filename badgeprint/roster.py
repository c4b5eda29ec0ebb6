# roster.py

import logging
import os
from typing import List, Optional

import pandas as pd

from badgeprint.exceptions import PersistenceError
from badgeprint.model import EmployeeResource

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = ('.xlsx', '.xls')


def _normalize_column(name) -> str:
    return ''.join(str(name).lower().split())


def _cell(row, column: str) -> str:
    value = row.get(column)
    if value is None or pd.isna(value):
        return ''
    # Codes read from spreadsheets come back as floats
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def read_table(path: str) -> pd.DataFrame:
    try:
        if path.lower().endswith(EXCEL_EXTENSIONS):
            df = pd.read_excel(path)
        else:
            df = pd.read_csv(path)
    except (OSError, ValueError) as e:
        raise PersistenceError(f"Cannot read roster {path}: {e}") from e
    df.columns = [_normalize_column(c) for c in df.columns]
    return df


def load_roster(path: str) -> List[EmployeeResource]:
    """
    Reads employees from a CSV or Excel sheet. Recognized columns, after
    lower-casing and removing whitespace: fullname (or name), position,
    employeecode, photo, signature. Rows without a name are skipped.
    """
    df = read_table(path)
    name_column = 'fullname' if 'fullname' in df.columns else 'name'
    if name_column not in df.columns:
        raise PersistenceError(f"Roster {os.path.basename(path)} has no 'Full Name' column")

    employees = []
    for row in df.to_dict('records'):
        name = _cell(row, name_column)
        if not name:
            continue
        employees.append(EmployeeResource(
            name=name,
            position=_cell(row, 'position'),
            employee_code=_cell(row, 'employeecode'),
            photo_ref=_cell(row, 'photo') or None,
            signature_ref=_cell(row, 'signature') or None,
        ))
    logger.info(f"roster.load_roster: Loaded {len(employees)} of {len(df)} rows from {path}.")
    return employees


def find_employee(employees: List[EmployeeResource], query: str) -> Optional[EmployeeResource]:
    """First employee whose name contains query, ignoring case. Exact matches win."""
    needle = query.strip().lower()
    if not needle:
        return None
    for employee in employees:
        if employee.name.lower() == needle:
            return employee
    for employee in employees:
        if needle in employee.name.lower():
            return employee
    return None
