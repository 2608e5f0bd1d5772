"""
Resolve the fee schedule that applies to a student.

The schedule is matched on (class level, school year). The school year is
taken from the student's class, then the student's entry year, then the
active school year setting.
"""

import logging
from typing import Optional

from scolarite.api.v1.school.service import get_active_school_year
from scolarite.core.exceptions import NotFound
from scolarite.db.store import CLASSES, STUDENTS, RecordStore

from .schemas import FeeScheduleResponse
from .service import find_fee_schedule, schedule_to_response

logger = logging.getLogger(__name__)


async def resolve_fee_schedule(store: RecordStore, student_id: str) -> Optional[FeeScheduleResponse]:
    """
    Return the student's fee schedule, or None when none can be determined.

    Raises NotFound when the student does not exist. A missing class, level
    or school year, or no configured schedule, all return None: callers treat
    that as "no schedule configured", not as an error.
    """
    student = await store.get_by_id(STUDENTS, student_id)
    if not student:
        raise NotFound("Student not found")

    school_class = await store.get_by_id(CLASSES, student.get("class_id"))
    if not school_class:
        return None

    level = school_class.get("level")
    school_year = (
        school_class.get("school_year")
        or student.get("entry_year")
        or await get_active_school_year(store)
    )
    if not level or not school_year:
        return None

    rec = await find_fee_schedule(store, level, school_year)
    if not rec:
        logger.debug("No fee schedule for %s %s", level, school_year)
        return None
    return schedule_to_response(rec)
