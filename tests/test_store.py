from sqlalchemy import func, select

from passport.db.models import Analysis


def _count(store) -> int:
    with store.session_factory() as session:
        return session.execute(select(func.count()).select_from(Analysis)).scalar_one()


class TestAnalysisStore:
    def test_upsert_creates(self, store):
        record = store.upsert("Octo", "Hello", "approved", "Good project")
        assert record.id is not None
        assert record.owner == "octo"
        assert record.repo == "hello"
        assert record.created_at is not None
        assert _count(store) == 1

    def test_upsert_overwrites(self, store):
        first = store.upsert("octo", "hello", "approved", "Good")
        second = store.upsert("OCTO", "HELLO", "rejected", "Changed")

        assert second.id == first.id
        assert _count(store) == 1
        stored = store.get("octo", "hello")
        assert stored.verdict == "rejected"
        assert stored.details == "Changed"

    def test_get_is_case_insensitive(self, store):
        store.upsert("octo", "hello", "approved", "Good")
        assert store.get("Octo", "HeLLo") is not None

    def test_get_missing(self, store):
        assert store.get("nobody", "nothing") is None
        assert store.get_verdict("nobody", "nothing") is None

    def test_get_verdict(self, store):
        store.upsert("octo", "hello", "rejected", "Harmful")
        assert store.get_verdict("octo", "hello") == "rejected"

    def test_separate_repos(self, store):
        store.upsert("octo", "a", "approved", "")
        store.upsert("octo", "b", "rejected", "")
        assert _count(store) == 2
