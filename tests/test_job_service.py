"""Tests for the job workflow."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import LAST_WEEK, THIS_WEEK, TODAY, USER_ID
from services.context import create_app_context
from services.exceptions import NotAuthenticated, ValidationError


class TestCreateJob:

    def test_creates_job_with_defaults(self, configured_app):
        job = configured_app.jobs.create_job(amount="15000", date="2025-11-12")

        assert job.id
        assert job.user_id == USER_ID
        assert job.amount == Decimal("15000")
        assert job.tip_amount == Decimal("0")
        assert job.date == TODAY
        assert job.tags == []
        assert job.client_id is None

    def test_bootstraps_settings_for_new_user(self, app):
        app.jobs.create_job(amount=5000, date=TODAY)

        history = app.settings.list_history()
        assert len(history) == 1
        assert history[0].effective_from == THIS_WEEK

    def test_creates_record_for_past_week(self, configured_app):
        configured_app.jobs.create_job(amount=5000, date=LAST_WEEK)
        assert configured_app.settings.store.find_covering(LAST_WEEK).effective_from == LAST_WEEK

    def test_with_client(self, configured_app):
        client = configured_app.clients.create_client(name="Lucia")
        job = configured_app.jobs.create_job(amount=8000, date=TODAY, client_id=client.id)

        assert configured_app.jobs.client_name_for(job) == "Lucia"

    def test_unknown_client_rejected(self, configured_app):
        with pytest.raises(ValidationError):
            configured_app.jobs.create_job(amount=8000, date=TODAY, client_id="missing")
        assert configured_app.jobs.list_jobs() == []

    @pytest.mark.parametrize("fields", [
        {"amount": -1, "date": TODAY},
        {"amount": 100, "tip_amount": -5, "date": TODAY},
        {"amount": 100},
        {"date": TODAY},
        {"amount": 100, "date": "12/11/2025"},
        {"amount": 100, "date": TODAY, "rating": 6},
        {"amount": 100, "date": TODAY, "rating": True},
        {"amount": 100, "date": TODAY, "tags": "balayage"},
        {"amount": 100, "date": TODAY, "price": 100},
    ])
    def test_invalid_fields_rejected(self, configured_app, fields):
        with pytest.raises(ValidationError):
            configured_app.jobs.create_job(**fields)

    def test_tags_are_trimmed(self, configured_app):
        job = configured_app.jobs.create_job(amount=100, date=TODAY, tags=[" color ", "", "cut"])
        assert job.tags == ["color", "cut"]


class TestUpdateDeleteJob:

    def test_update_fields(self, configured_app):
        job = configured_app.jobs.create_job(amount=100, date=TODAY)

        updated = configured_app.jobs.update_job(job.id, amount=250, rating=5, description="Corte")

        assert updated.amount == Decimal("250")
        assert updated.rating == 5
        assert updated.description == "Corte"
        assert configured_app.jobs.get_job(job.id).amount == Decimal("250")

    def test_update_missing_job(self, configured_app):
        assert configured_app.jobs.update_job("missing", amount=1) is None

    def test_update_rejects_negative_tip(self, configured_app):
        job = configured_app.jobs.create_job(amount=100, date=TODAY)
        with pytest.raises(ValidationError):
            configured_app.jobs.update_job(job.id, tip_amount=-1)

    def test_delete(self, configured_app):
        job = configured_app.jobs.create_job(amount=100, date=TODAY)

        assert configured_app.jobs.delete_job(job.id) is True
        assert configured_app.jobs.get_job(job.id) is None
        assert configured_app.jobs.delete_job(job.id) is False

    def test_list_week_jobs_newest_first(self, configured_app):
        configured_app.jobs.create_job(amount=1, date=date(2025, 11, 8))
        configured_app.jobs.create_job(amount=2, date=date(2025, 11, 14))
        configured_app.jobs.create_job(amount=3, date=date(2025, 11, 15))
        configured_app.jobs.create_job(amount=4, date=date(2025, 11, 7))

        jobs = configured_app.jobs.list_week_jobs(TODAY)

        assert [j.amount for j in jobs] == [Decimal("2"), Decimal("1")]


class TestClientReferences:

    def test_deleted_client_shows_as_no_client(self, configured_app):
        client = configured_app.clients.create_client(name="Marta")
        job = configured_app.jobs.create_job(amount=100, date=TODAY, client_id=client.id)

        configured_app.clients.delete_client(client.id)

        stored = configured_app.jobs.get_job(job.id)
        assert stored.client_id == client.id
        assert configured_app.jobs.client_name_for(stored) is None
        assert configured_app.jobs.client_name_for(stored, clients_by_id={}) is None


class TestUserScoping:

    @pytest.mark.parametrize("user_id", [None, ""])
    def test_requires_user(self, user_id):
        with pytest.raises(NotAuthenticated):
            create_app_context(user_id, backend="memory")

    def test_users_do_not_see_each_other(self, configured_app, database, clock):
        job = configured_app.jobs.create_job(amount=100, date=TODAY)
        other = create_app_context("user-2", backend="memory", today=clock, database=database)

        assert other.jobs.list_jobs() == []
        assert other.jobs.get_job(job.id) is None
        assert other.jobs.delete_job(job.id) is False
        assert other.settings.get_current() is None
