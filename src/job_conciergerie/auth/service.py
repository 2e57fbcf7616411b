from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional, Sequence, Tuple, Union

from ..common.logging import get_logger
from ..conciergeries.model import Conciergerie
from ..conciergeries.repository import ConciergerieRepository
from ..core.enums import EmployeeStatus, UserType
from ..database.mysql_base import DatabaseError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository

LOG = get_logger("job_conciergerie.auth")


@dataclass(frozen=True)
class CompanyCheck:
    status_code: int
    authorized: bool
    message: str
    company: Optional[str] = None

    def to_dict(self) -> dict:
        if self.status_code in (400, 500):
            return {"error": self.message}
        body = {"authorized": self.authorized, "message": self.message}
        if self.company:
            body["company"] = self.company
        return body


def load_companies(names: Union[str, Sequence[str], None], environ: Mapping[str, str] = os.environ) -> dict:
    """``COMPANIES`` lists company names; each company variable lists its allowed ids."""
    if isinstance(names, str):
        names = names.split(",")
    companies = {}
    for name in names or ():
        name = name.strip()
        if not name:
            continue
        raw = environ.get(name, "")
        companies[name] = tuple(v.strip() for v in raw.split(",") if v.strip())
    return companies


class AuthService:
    def __init__(
        self,
        conciergeries: ConciergerieRepository,
        employees: EmployeeRepository,
        *,
        companies: Optional[Mapping[str, Sequence[str]]] = None,
    ):
        self._conciergeries = conciergeries
        self._employees = employees
        self._companies = dict(companies or {})

    def check_user_exists(self, user_id: str) -> Tuple[Optional[UserType], Optional[Union[Employee, Conciergerie]]]:
        try:
            employee = self._employees.get_by_id(user_id)
            if employee:
                return UserType.EMPLOYEE, employee

            conciergerie = self._conciergeries.get_by_id(user_id)
            if conciergerie:
                return UserType.CONCIERGERIE, conciergerie
        except DatabaseError:
            LOG.exception("error checking user existence for id %s", user_id)
        return None, None

    def get_existing_user_type(self, user_id: Optional[str]) -> Optional[UserType]:
        """Type of a registered user. Pending or rejected employees are not registered yet.

        Database errors propagate to the caller.
        """
        if not user_id:
            return None

        if self._conciergeries.get_by_id(user_id):
            return UserType.CONCIERGERIE

        employee = self._employees.get_by_device_id(user_id)
        if employee and employee.status == EmployeeStatus.ACCEPTED and employee.owns_device(user_id):
            return UserType.EMPLOYEE
        return None

    def check_company_id(self, user_id: Optional[str]) -> CompanyCheck:
        if not user_id:
            return CompanyCheck(400, False, "user_id parameter is required")
        if not self._companies:
            return CompanyCheck(500, False, "No companies configured")

        for company, ids in self._companies.items():
            if user_id in ids:
                return CompanyCheck(200, True, f"User authorized for {company}", company)
        return CompanyCheck(403, False, "User not authorized for any company")
