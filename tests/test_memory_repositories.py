"""In-memory store tests: returned records never share state with the table."""

from decimal import Decimal

from conftest import TODAY
from services.models import BonusTier


class TestListFieldsAreCopied:

    def test_job_tags(self, configured_app):
        tags = ["Corte"]
        job = configured_app.jobs.create_job(amount=100, date=TODAY, tags=tags)

        job.tags.append("Color")
        configured_app.jobs.get_job(job.id).tags.append("Mechas")
        configured_app.jobs.list_jobs()[0].tags.clear()
        tags.append("Brushing")

        assert configured_app.jobs.get_job(job.id).tags == ["Corte"]

    def test_updated_job_tags(self, configured_app):
        job = configured_app.jobs.create_job(amount=100, date=TODAY)

        updated = configured_app.jobs.update_job(job.id, tags=["Keratina"])
        updated.tags.append("Alisado")

        assert configured_app.jobs.get_job(job.id).tags == ["Keratina"]

    def test_settings_tiers(self, configured_app):
        store = configured_app.settings.store
        record = store.find_open()

        record.fixed_bonus_tiers.append(BonusTier(Decimal("500000"), Decimal("1")))
        store.list_all()[0].fixed_bonus_tiers.clear()

        assert store.find_open().fixed_bonus_tiers == [BonusTier(Decimal("100000"), Decimal("10000"))]
