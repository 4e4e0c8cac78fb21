import asyncio
from datetime import date
from types import SimpleNamespace

from cardstudio.domain.celebrations import CelebrationScanner, celebration_for, is_same_day
from conftest import FakeEmailSender


class StubPipeline:
    def __init__(self, ai_available=True, fail_for=()):
        self.ai_available = ai_available
        self.fail_for = set(fail_for)
        self.calls = []

    async def generate_message(self, name, occasion="birthday"):
        self.calls.append((name, occasion))
        if name in self.fail_for:
            raise RuntimeError("generation exploded")
        return f"Happy day, {name}!\nEnjoy it.", self.ai_available


def _person(name, email, dob=None, doj=None, photo=None):
    return SimpleNamespace(name=name, email=email, photo=photo, date_of_birth=dob, date_of_joining=doj)


def _scanner(people, pipeline=None, sender=None, admin="admin@example.com", today=date(2025, 3, 15)):
    async def load():
        return people

    return CelebrationScanner(
        load_people=load,
        pipeline=pipeline or StubPipeline(),
        email_sender=sender or FakeEmailSender(),
        notification_email=admin,
        today=lambda: today,
    )


def test_same_day_ignores_year():
    today = date(2025, 3, 15)
    assert is_same_day(date(1990, 3, 15), today)
    assert not is_same_day(date(1990, 3, 14), today)
    assert not is_same_day(date(1990, 3, 16), today)
    assert not is_same_day(None, today)


def test_leap_day_is_celebrated_on_feb_28_in_common_years():
    leapling = date(2000, 2, 29)
    assert is_same_day(leapling, date(2025, 2, 28))
    assert not is_same_day(leapling, date(2025, 3, 1))
    assert is_same_day(leapling, date(2024, 2, 29))
    assert not is_same_day(leapling, date(2024, 2, 28))


def test_birthday_and_anniversary_on_same_day():
    person = _person("Ana", "ana@example.com", dob=date(1990, 3, 15), doj=date(2019, 3, 15))
    celebration = celebration_for(person, date(2025, 3, 15))
    assert celebration.is_birthday and celebration.is_work_anniversary
    assert celebration.occasion == "both"


def test_one_failure_does_not_stop_the_batch():
    people = [
        _person("P1", "p1@example.com", dob=date(1990, 3, 15)),
        _person("P2", "p2@example.com", dob=date(1991, 3, 15)),
        _person("P3", "p3@example.com", doj=date(2020, 3, 15)),
    ]
    sender = FakeEmailSender(fail_for={"p2@example.com"})
    summary = asyncio.run(_scanner(people, sender=sender).run())

    assert [(r.name, r.status) for r in summary.processed] == [("P1", "success"), ("P2", "error"), ("P3", "success")]
    assert "mailbox unavailable" in summary.processed[1].error
    recipients = [m.to for m in sender.sent]
    assert recipients == ["p1@example.com", "admin@example.com", "p3@example.com", "admin@example.com"]


def test_message_generation_failure_is_isolated():
    people = [
        _person("P1", "p1@example.com", dob=date(1990, 3, 15)),
        _person("P2", "p2@example.com", dob=date(1990, 3, 15)),
    ]
    summary = asyncio.run(_scanner(people, pipeline=StubPipeline(fail_for={"P1"})).run())
    assert [r.status for r in summary.processed] == ["error", "success"]


def test_no_matches_gives_empty_summary():
    people = [_person("P1", "p1@example.com", dob=date(1990, 3, 14))]
    sender = FakeEmailSender()
    summary = asyncio.run(_scanner(people, sender=sender).run())

    assert summary.processed == []
    assert summary.skipped is False
    assert sender.sent == []


def test_admin_person_gets_single_notification():
    people = [_person("Boss", "admin@example.com", dob=date(1980, 3, 15))]
    sender = FakeEmailSender()
    summary = asyncio.run(_scanner(people, sender=sender).run())

    assert summary.processed[0].status == "success"
    assert [m.to for m in sender.sent] == ["admin@example.com"]


def test_invalid_personal_address_still_notifies_admin():
    people = [_person("Ana", "not-an-address", dob=date(1990, 3, 15))]
    sender = FakeEmailSender()
    summary = asyncio.run(_scanner(people, sender=sender).run())

    assert summary.processed[0].status == "success"
    assert [m.to for m in sender.sent] == ["admin@example.com"]


def test_missing_notification_address_skips_scan():
    pipeline = StubPipeline(ai_available=False)
    summary = asyncio.run(_scanner([_person("Ana", "a@example.com", dob=date(1990, 3, 15))],
                                   pipeline=pipeline, admin="").run())

    assert summary.skipped is True
    assert "NOTIFICATION_EMAIL" in summary.error
    assert summary.ai_available is False
    assert pipeline.calls == []


def test_occasion_passed_to_message_generation():
    people = [_person("Ana", "ana@example.com", doj=date(2015, 3, 15))]
    pipeline = StubPipeline()
    asyncio.run(_scanner(people, pipeline=pipeline).run())
    assert pipeline.calls == [("Ana", "anniversary")]
