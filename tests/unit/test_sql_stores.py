"""SQL store tests against SQLite (in-memory, plus a file DB for concurrent writers)."""
import threading

import pytest
from sqlalchemy.orm import sessionmaker

from learntrack.config import Base, build_engine
from learntrack.errors import Conflict
from learntrack.models.models import AssessmentResult, ModuleProgress
from learntrack.stores.credential_store import SqlCredentialStore
from learntrack.stores.progress_store import SqlProgressStore


@pytest.mark.unit
class TestSqlCredentialStore:
    def test_create_and_find(self, db_session):
        store = SqlCredentialStore(db_session)
        created = store.create("New@Kenbright.com", "New", "hash")
        assert created.id is not None
        assert created.role == "user"
        assert store.find_by_email("new@kenbright.com").id == created.id
        assert store.find_by_id(created.id).email == "new@kenbright.com"

    def test_missing(self, db_session):
        store = SqlCredentialStore(db_session)
        assert store.find_by_email("nobody@kenbright.com") is None
        assert store.find_by_id(42) is None

    def test_duplicate_email_conflicts_and_session_recovers(self, db_session):
        store = SqlCredentialStore(db_session)
        store.create("dup@kenbright.com", "One", "hash")
        with pytest.raises(Conflict):
            store.create("DUP@kenbright.com", "Two", "hash")
        # rolled back, so the session is usable again
        assert store.create("other@kenbright.com", "Three", "hash").id is not None


@pytest.mark.unit
class TestSqlProgressStore:
    def test_upsert_merges_monotonically(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        first, created = store.upsert(db_user.id, 3, 40, 70, 10)
        assert created is True
        assert (first.progress, first.score, first.time_spent, first.completed) == (40, 70, 10, False)
        second, created = store.upsert(db_user.id, 3, 30, 60, 5)
        assert created is False
        assert (second.progress, second.score, second.time_spent) == (40, 70, 15)
        third, _ = store.upsert(db_user.id, 3, 100, 90, 0)
        assert (third.progress, third.score, third.completed) == (100, 90, True)
        assert db_session.query(ModuleProgress).count() == 1

    def test_last_accessed_moves_forward(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        first, _ = store.upsert(db_user.id, 1, 10, 0, 0)
        second, _ = store.upsert(db_user.id, 1, 5, 0, 0)
        assert second.last_accessed >= first.last_accessed

    def test_list_for_user_is_ordered(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        for module_id in (12, 3, 7):
            store.upsert(db_user.id, module_id, 10, 0, 0)
        assert [r.module_id for r in store.list_for_user(db_user.id)] == [3, 7, 12]
        assert store.list_for_user(db_user.id + 1) == []

    def test_created_flag_is_per_row(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        assert store.upsert(db_user.id, 4, 10, 0, 0)[1] is True
        assert store.upsert(db_user.id, 5, 10, 0, 0)[1] is True
        assert store.upsert(db_user.id, 4, 20, 0, 0)[1] is False

    def test_upsert_after_complete_is_an_update(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        store.complete(db_user.id, 8, 70)
        record, created = store.upsert(db_user.id, 8, 10, 0, 4)
        assert created is False
        assert (record.progress, record.completed, record.score, record.time_spent) == (100, True, 70, 4)

    def test_complete_inserts_when_absent(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        record = store.complete(db_user.id, 6, 55)
        assert (record.progress, record.completed, record.score, record.time_spent) == (100, True, 55, 0)

    def test_complete_keeps_best_score(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        store.upsert(db_user.id, 6, 20, 95, 8)
        record = store.complete(db_user.id, 6, 55)
        assert (record.progress, record.completed, record.score, record.time_spent) == (100, True, 95, 8)

    def test_record_assessment_writes_both_rows(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        assessment_id = store.record_assessment(db_user.id, 2, 80, 10, 8, "3:20", "Nice")
        assert db_session.query(AssessmentResult).filter(AssessmentResult.id == assessment_id).one().feedback == "Nice"
        record = store.get(db_user.id, 2)
        assert record.completed is True and record.score == 80

    def test_list_assessments_newest_first_with_limit(self, db_session, db_user):
        store = SqlProgressStore(db_session)
        ids = [store.insert_assessment(db_user.id, 1, 10 * i, 10, i) for i in range(1, 13)]
        listed = store.list_assessments(db_user.id)
        assert len(listed) == 10
        assert [a.id for a in listed] == list(reversed(ids))[:10]
        assert len(store.list_assessments(db_user.id, limit=3)) == 3


@pytest.mark.unit
def test_concurrent_upserts_lose_no_time(tmp_path):
    import learntrack.models  # noqa: F401
    from learntrack.models.models import User

    engine = build_engine(f"sqlite:///{tmp_path / 'concurrency.db'}")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    with SessionLocal() as db:
        user = User(email="race@kenbright.com", name="Race", hashed_password="x")
        db.add(user)
        db.commit()
        user_id = user.id

    workers, writes = 4, 5
    errors = []

    def worker(offset: int) -> None:
        db = SessionLocal()
        try:
            store = SqlProgressStore(db)
            for i in range(writes):
                store.upsert(user_id, 1, offset * 10 + i, offset * 10 + i, 1)
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    with SessionLocal() as db:
        record = SqlProgressStore(db).get(user_id, 1)
    assert record.time_spent == workers * writes
    assert record.progress == (workers - 1) * 10 + writes - 1
    engine.dispose()
