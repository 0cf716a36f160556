"""Tests for confidence-gated patch application."""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from grantflow.core.exceptions import ConfigurationError, DatabaseError, ProfileNotFoundError
from grantflow.database.models import FundingSource
from grantflow.repositories.funding_source_repository import FundingSourceRepository
from grantflow.repositories.profile_repository import ProfileRepository
from grantflow.schemas.patches import PatchDocument
from grantflow.services.patch.patch_applier import PatchApplier, is_empty


def profile_patch(**fields):
    return PatchDocument.model_validate(
        {
            "profile": {
                "set": {
                    name: {"value": value, "confidence": confidence}
                    for name, (value, confidence) in fields.items()
                }
            }
        }
    )


def funding_patch(*entries):
    return PatchDocument.model_validate(
        {
            "funding_sources": [
                {
                    "upsert_by": {"name": name},
                    "set": {
                        field: {"value": value, "confidence": confidence}
                        for field, (value, confidence) in fields.items()
                    },
                }
                for name, fields in entries
            ]
        }
    )


@pytest.fixture
def applier(db_session, audit_logger):
    return PatchApplier(db_session, audit_logger=audit_logger, min_confidence=0.7)


@pytest.mark.parametrize("value, expected", [(None, True), ("", True), ("   ", True), ("CA", False), (0.0, False)])
def test_is_empty(value, expected):
    assert is_empty(value) is expected


class TestProfilePatches:
    """Profile fields are backfilled, never overwritten."""

    @pytest.mark.asyncio
    async def test_fills_empty_fields_and_audits_once(self, applier, profile, audit_logger, db_session):
        patches = profile_patch(dob=("2006-02-14", 0.9), state=("CA", 0.75), zip=("90001", 0.75))

        summary = await applier.apply(patches, document_id=uuid4(), profile_id=profile.id)

        assert {change.field for change in summary.profile} == {"dob", "state", "zip"}
        assert all(change.old_value is None for change in summary.profile)
        stored = await ProfileRepository(db_session).get_by_id(profile.id)
        assert stored.dob == "2006-02-14"
        assert stored.state == "CA"

        entries = await audit_logger.get_recent()
        assert len(entries) == 1
        assert entries[0].entity == "profile"
        assert entries[0].action == "update"
        assert entries[0].record_id == str(profile.id)
        assert entries[0].before["dob"] is None
        assert entries[0].after["dob"] == "2006-02-14"

    @pytest.mark.asyncio
    async def test_reapplying_is_a_no_op(self, applier, profile, audit_logger):
        patches = profile_patch(dob=("2006-02-14", 0.9))

        first = await applier.apply(patches, document_id=uuid4(), profile_id=profile.id)
        second = await applier.apply(patches, document_id=uuid4(), profile_id=profile.id)

        assert first.total_changes == 1
        assert second.total_changes == 0
        assert len(await audit_logger.get_recent()) == 1

    @pytest.mark.asyncio
    async def test_confidence_gate_is_inclusive(self, applier, profile):
        patches = profile_patch(city=("Reno", 0.7), zip=("89501", 0.69))

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert [change.field for change in summary.profile] == ["city"]
        assert summary.profile[0].confidence == 0.7

    @pytest.mark.asyncio
    async def test_existing_values_kept_and_blank_strings_filled(self, applier, profile, db_session):
        profile.full_name = "Jane Doe"
        profile.city = "  "
        await db_session.commit()
        patches = profile_patch(full_name=("Janet Doe", 0.95), city=("Reno", 0.9))

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert [change.field for change in summary.profile] == ["city"]
        assert summary.profile[0].old_value == "  "
        stored = await ProfileRepository(db_session).get_by_id(profile.id)
        assert stored.full_name == "Jane Doe"
        assert stored.city == "Reno"

    @pytest.mark.asyncio
    async def test_unknown_fields_are_skipped(self, applier, profile):
        patches = profile_patch(expiration_date=("2030-02-14", 0.85), display_name=("Hacked", 1.0))

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert summary.total_changes == 0

    @pytest.mark.asyncio
    async def test_missing_profile_raises(self, applier, audit_logger):
        patches = profile_patch(dob=("2006-02-14", 0.9))

        with pytest.raises(ProfileNotFoundError):
            await applier.apply(patches, document_id=uuid4(), profile_id=uuid4())

        assert await audit_logger.get_recent() == []


class TestFundingSourcePatches:
    """Funding sources are upserted by exact name."""

    @pytest.mark.asyncio
    async def test_inserts_new_source_with_remapped_fields(self, applier, profile, audit_logger, db_session):
        patches = funding_patch(
            (
                "Example Scholarship Foundation",
                {
                    "contact_email": ("awards@examplescholarship.org", 0.95),
                    "contact_phone": ("555-123-4567", 0.9),
                    "award_amount": (5000.0, 0.75),
                },
            )
        )

        summary = await applier.apply(patches, document_id=uuid4(), profile_id=profile.id)

        assert {change.field for change in summary.funding_sources} == {"email", "phone", "award_amount"}
        assert all(change.name == "Example Scholarship Foundation" for change in summary.funding_sources)
        record = await FundingSourceRepository(db_session).get_by_name("Example Scholarship Foundation")
        assert record.email == "awards@examplescholarship.org"
        assert record.phone == "555-123-4567"
        assert record.award_amount == pytest.approx(5000.0)

        entries = await audit_logger.get_recent()
        assert len(entries) == 1
        assert entries[0].entity == "funding_source"
        assert entries[0].action == "insert"
        assert entries[0].before is None

    @pytest.mark.asyncio
    async def test_existing_source_only_gets_empty_fields(self, applier, profile, db_session):
        db_session.add(FundingSource(name="River Fund", email="old@river.org"))
        await db_session.commit()
        patches = funding_patch(
            ("River Fund", {"contact_email": ("new@river.org", 0.95), "contact_phone": ("555-000-1111", 0.9)})
        )

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert [change.field for change in summary.funding_sources] == ["phone"]
        record = await FundingSourceRepository(db_session).get_by_name("River Fund")
        assert record.email == "old@river.org"
        assert record.phone == "555-000-1111"

    @pytest.mark.asyncio
    async def test_overwrite_policy_replaces_differing_values(self, db_session, audit_logger, profile):
        db_session.add(FundingSource(name="River Fund", email="old@river.org", phone="555-000-1111"))
        await db_session.commit()
        applier = PatchApplier(
            db_session, audit_logger=audit_logger, min_confidence=0.7, funding_source_policy="overwrite"
        )
        patches = funding_patch(
            ("River Fund", {"contact_email": ("new@river.org", 0.95), "contact_phone": ("555-000-1111", 0.9)})
        )

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert len(summary.funding_sources) == 1
        change = summary.funding_sources[0]
        assert (change.field, change.old_value, change.new_value) == ("email", "old@river.org", "new@river.org")

    @pytest.mark.asyncio
    async def test_low_confidence_entry_is_not_inserted(self, applier, profile, db_session, audit_logger):
        patches = funding_patch(("Quiet Fund", {"contact_email": ("q@quiet.org", 0.5)}))

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert summary.total_changes == 0
        assert await FundingSourceRepository(db_session).get_by_name("Quiet Fund") is None
        assert await audit_logger.get_recent() == []

    @pytest.mark.asyncio
    async def test_insert_failure_does_not_abort_other_entries(self, applier, profile, db_session, audit_logger):
        db_session.add(FundingSource(name="River Fund"))
        await db_session.commit()
        patches = funding_patch(
            ("Broken Fund", {"contact_email": ("b@broken.org", 0.95)}),
            ("River Fund", {"contact_email": ("info@river.org", 0.95)}),
        )

        with patch.object(
            FundingSourceRepository,
            "create",
            new=AsyncMock(side_effect=DatabaseError("insert failed")),
        ):
            summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert [(c.name, c.field) for c in summary.funding_sources] == [("River Fund", "email")]
        entries = await audit_logger.get_recent()
        assert [entry.action for entry in entries] == ["update"]

    @pytest.mark.asyncio
    async def test_missing_table_skips_funding_sources_only(self, db_engine, applier, profile):
        async with db_engine.begin() as conn:
            await conn.run_sync(FundingSource.__table__.drop)
        patches = PatchDocument.model_validate(
            {
                "profile": {"set": {"city": {"value": "Reno", "confidence": 0.9}}},
                "funding_sources": [
                    {"upsert_by": {"name": "River Fund"}, "set": {"contact_email": {"value": "a@b.org", "confidence": 0.9}}}
                ],
            }
        )

        summary = await applier.apply(patches, document_id=None, profile_id=profile.id)

        assert [change.field for change in summary.profile] == ["city"]
        assert summary.funding_sources == []


def test_unknown_policy_rejected(db_session, audit_logger):
    with pytest.raises(ConfigurationError):
        PatchApplier(db_session, audit_logger=audit_logger, funding_source_policy="merge")
