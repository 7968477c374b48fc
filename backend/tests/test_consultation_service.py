"""
ConnectPair Backend: Consultation Service Unit Tests
=====================================================

What:  Tests for ConsultationService (submit, list).
How:   Real SQLite sessions for the happy paths, a mock session to force
       storage failures. Background tasks are inspected, not run, unless a
       test runs them explicitly.

What we test:
    ✅ Valid submission stores one row and schedules two notifications
    ✅ Optional fields stored as NULL / '' when omitted
    ✅ Invalid submission raises ValidationError and stores nothing
    ✅ Commit failure raises DatabaseError and schedules nothing
    ✅ Listing: most recent first, status filter, limit/offset
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from starlette.background import BackgroundTasks

from connectpair.exceptions import DatabaseError, ValidationError
from connectpair.models.consultation import Consultation
from connectpair.services.consultation_service import ConsultationService

VALID_CONSULTATION = {
    "relationshipType": "couple",
    "names": "Alice & Bob",
    "email": "a@example.com",
    "phone": "555-0100",
    "budget": "premium",
}


async def _count(db_session) -> int:
    return (await db_session.execute(select(func.count(Consultation.id)))).scalar_one()


class TestSubmitConsultation:

    def setup_method(self):
        self.service = ConsultationService()

    @pytest.mark.asyncio
    async def test_stores_row_and_returns_id(self, db_session, notifier):
        tasks = BackgroundTasks()

        result = await self.service.submit_consultation(
            db=db_session, fields=VALID_CONSULTATION, notifier=notifier, background_tasks=tasks
        )

        assert result.success is True
        assert result.consultation_id == 1
        row = (await db_session.execute(select(Consultation))).scalar_one()
        assert row.relationship_type == "couple"
        assert row.names == "Alice & Bob"
        assert row.email == "a@example.com"
        assert row.phone == "555-0100"
        assert row.budget == "premium"
        assert row.status == "pending"
        assert row.anniversary is None
        assert row.preferences == ""

    @pytest.mark.asyncio
    async def test_schedules_confirmation_and_admin_alert(
        self, db_session, notifier, mail_transport
    ):
        tasks = BackgroundTasks()

        await self.service.submit_consultation(
            db=db_session, fields=VALID_CONSULTATION, notifier=notifier, background_tasks=tasks
        )

        assert len(tasks.tasks) == 2
        assert mail_transport.sent == []  # nothing goes out before the response

        await tasks()

        assert mail_transport.recipients() == ["a@example.com", "admin@example.com"]

    @pytest.mark.asyncio
    async def test_optional_fields_are_stored(self, db_session, notifier):
        fields = {**VALID_CONSULTATION, "anniversary": "2019-06-14", "preferences": "matching 7s"}

        await self.service.submit_consultation(
            db=db_session, fields=fields, notifier=notifier, background_tasks=BackgroundTasks()
        )

        row = (await db_session.execute(select(Consultation))).scalar_one()
        assert row.anniversary == "2019-06-14"
        assert row.preferences == "matching 7s"

    @pytest.mark.asyncio
    async def test_ids_increase(self, db_session, notifier):
        first = await self.service.submit_consultation(
            db=db_session, fields=VALID_CONSULTATION, notifier=notifier,
            background_tasks=BackgroundTasks(),
        )
        second = await self.service.submit_consultation(
            db=db_session, fields=VALID_CONSULTATION, notifier=notifier,
            background_tasks=BackgroundTasks(),
        )

        assert second.consultation_id > first.consultation_id > 0

    @pytest.mark.asyncio
    async def test_invalid_submission_stores_nothing(self, db_session, notifier):
        tasks = BackgroundTasks()
        fields = {"names": "Alice & Bob", "email": "nope"}

        with pytest.raises(ValidationError) as exc_info:
            await self.service.submit_consultation(
                db=db_session, fields=fields, notifier=notifier, background_tasks=tasks
            )

        assert [e["field"] for e in exc_info.value.errors] == [
            "relationshipType",
            "email",
            "phone",
            "budget",
        ]
        assert tasks.tasks == []
        assert await _count(db_session) == 0

    @pytest.mark.asyncio
    async def test_commit_failure_raises_and_schedules_nothing(
        self, mock_db_session, notifier
    ):
        tasks = BackgroundTasks()
        mock_db_session.commit.side_effect = OperationalError(
            "INSERT INTO consultations", {}, Exception("database is locked")
        )

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.submit_consultation(
                db=mock_db_session,
                fields=VALID_CONSULTATION,
                notifier=notifier,
                background_tasks=tasks,
            )

        assert exc_info.value.message == "Database error"
        assert exc_info.value.context["error_type"] == "OperationalError"
        mock_db_session.rollback.assert_awaited_once()
        assert tasks.tasks == []


class TestListConsultations:

    def setup_method(self):
        self.service = ConsultationService()

    async def _submit(self, db_session, notifier, names):
        result = await self.service.submit_consultation(
            db=db_session,
            fields={**VALID_CONSULTATION, "names": names},
            notifier=notifier,
            background_tasks=BackgroundTasks(),
        )
        return result.consultation_id

    @pytest.mark.asyncio
    async def test_most_recent_first(self, db_session, notifier):
        for names in ("first", "second", "third"):
            await self._submit(db_session, notifier, names)

        result = await self.service.list_consultations(db_session)

        assert [c.names for c in result.consultations] == ["third", "second", "first"]

    @pytest.mark.asyncio
    async def test_limit_and_offset(self, db_session, notifier):
        for names in ("first", "second", "third"):
            await self._submit(db_session, notifier, names)

        result = await self.service.list_consultations(db_session, limit=1, offset=1)

        assert [c.names for c in result.consultations] == ["second"]

    @pytest.mark.asyncio
    async def test_status_filter(self, db_session, notifier):
        first_id = await self._submit(db_session, notifier, "first")
        await self._submit(db_session, notifier, "second")
        row = await db_session.get(Consultation, first_id)
        row.status = "contacted"
        await db_session.commit()

        contacted = await self.service.list_consultations(db_session, status="contacted")
        pending = await self.service.list_consultations(db_session, status="pending")

        assert [c.id for c in contacted.consultations] == [first_id]
        assert [c.names for c in pending.consultations] == ["second"]

    @pytest.mark.asyncio
    async def test_empty_store(self, db_session):
        result = await self.service.list_consultations(db_session)

        assert result.success is True
        assert result.consultations == []

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT", {}, Exception("no such table: consultations")
        )

        with pytest.raises(DatabaseError):
            await self.service.list_consultations(mock_db_session)
