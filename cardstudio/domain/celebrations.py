# cardstudio/domain/celebrations.py
import calendar
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Awaitable, Callable, List, Optional, Sequence

from cardstudio.domain.notifications import (
    Celebration, build_admin_email, build_person_email, is_valid_email,
)

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    logger.propagate = False


def is_same_day(d: Optional[date], today: date) -> bool:
    """Month and day match, year ignored.

    Feb 29 dates are celebrated on Feb 28 in non-leap years.
    """
    if d is None:
        return False
    if d.month == 2 and d.day == 29 and not calendar.isleap(today.year):
        return today.month == 2 and today.day == 28
    return d.month == today.month and d.day == today.day


def celebration_for(person, today: date) -> Celebration:
    return Celebration(
        is_birthday=is_same_day(person.date_of_birth, today),
        is_work_anniversary=is_same_day(person.date_of_joining, today),
    )


@dataclass
class PersonResult:
    name: str
    status: str
    celebration: Celebration
    error: Optional[str] = None
    is_ai_generated: Optional[bool] = None


@dataclass
class ScanSummary:
    ai_available: bool
    processed: List[PersonResult] = field(default_factory=list)
    skipped: bool = False
    error: Optional[str] = None


class CelebrationScanner:
    """Daily pass over all people: message + notifications for each celebration.

    People are handled one after another; a failure for one person is recorded
    in the summary and the scan moves on.
    """

    def __init__(
        self,
        load_people: Callable[[], Awaitable[Sequence]],
        pipeline,
        email_sender,
        notification_email: Optional[str],
        today: Callable[[], date] = date.today,
    ):
        self.load_people = load_people
        self.pipeline = pipeline
        self.email_sender = email_sender
        self.notification_email = (notification_email or "").strip()
        self.today = today

    async def _notify(self, person, celebration: Celebration) -> PersonResult:
        message, is_ai = await self.pipeline.generate_message(person.name, celebration.occasion)

        if person.email == self.notification_email:
            logger.info(f"{person.name} is the admin recipient; sending admin notification only")
        elif is_valid_email(person.email):
            await self.email_sender.send(
                build_person_email(person.email, person.name, message, person.photo, celebration)
            )
        else:
            logger.warning(f"{person.name} has no usable email address ('{person.email}'); skipping personal email")

        await self.email_sender.send(
            build_admin_email(self.notification_email, person.name, message, person.photo, celebration)
        )
        return PersonResult(name=person.name, status="success", celebration=celebration, is_ai_generated=is_ai)

    async def run(self) -> ScanSummary:
        ai_available = self.pipeline.ai_available
        logger.info(f"Celebration scan starting (AI available: {ai_available})")

        if not is_valid_email(self.notification_email):
            logger.warning("NOTIFICATION_EMAIL is missing or invalid; celebration scan skipped")
            return ScanSummary(
                ai_available=ai_available,
                skipped=True,
                error=(
                    "NOTIFICATION_EMAIL environment variable is missing or invalid. "
                    "Please set a valid email address in your environment variables."
                ),
            )

        today = self.today()
        people = await self.load_people()
        summary = ScanSummary(ai_available=ai_available)

        for person in people:
            celebration = celebration_for(person, today)
            if not celebration.any:
                continue
            try:
                result = await self._notify(person, celebration)
            except Exception as e:
                logger.error(f"Error processing celebration for {person.name}: {e}", exc_info=True)
                result = PersonResult(name=person.name, status="error", celebration=celebration, error=str(e) or type(e).__name__)
            summary.processed.append(result)

        logger.info(
            f"Celebration scan finished for {today.isoformat()}: "
            f"{sum(r.status == 'success' for r in summary.processed)} ok, "
            f"{sum(r.status == 'error' for r in summary.processed)} failed"
        )
        return summary
