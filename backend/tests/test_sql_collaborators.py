"""
Full uploads through the SQL-backed collaborators.
"""

from prepbank.core.constants import UploadKind
from prepbank.db.session import init_models, make_engine, make_session_factory, session_scope
from prepbank.pipeline.engine import UploadEngine
from prepbank.repositories import companies, questions, whitelist
from prepbank.schemas import Company
from prepbank.services.sql_collaborators import SqlCollaborators
from tests.conftest import QUESTION_HEADER


async def test_question_upload_persists_companies_and_questions(session_factory):
    async with session_scope(session_factory) as db:
        await companies.create_company(db, Company(name="Known"))

    store = SqlCollaborators(session_factory, max_concurrent_writes=1)
    text = "\n".join([
        QUESTION_HEADER,
        "Acme,Tech,SDE,SQL,Hard,Explain joins,,Yes",
        "Known,Finance,Analyst,Finance,Easy,What is NPV?,,No",
        "Acme,Tech,SDE,SQL,Hard,Explain joins,Use a diagram,Yes",
    ])
    report = (await UploadEngine().run(
        UploadKind.QUESTION, text,
        collaborators=store.as_collaborators(),
        known_companies=await store.load_known_companies(),
    )).report

    assert report.success_count == 3
    assert report.warnings == []

    async with session_scope(session_factory) as db:
        assert [c.name for c in await companies.list_companies(db)] == ["Acme", "Known"]
        saved = await questions.list_questions(db)

    # The repeated question is upserted, not duplicated.
    assert sorted(q.text for q in saved) == ["Explain joins", "What is NPV?"]


async def test_whitelist_upload_persists_entries(session_factory):
    store = SqlCollaborators(session_factory, max_concurrent_writes=1)
    text = "Email,Role,Auth Provider,Name\nprof@pilani.bits-pilani.ac.in,Faculty,google,Prof\n"

    report = (await UploadEngine().run(UploadKind.USER, text, collaborators=store.as_collaborators())).report

    assert report.success_count == 1
    async with session_scope(session_factory) as db:
        entry = await whitelist.get_entry_by_email(db, "prof@pilani.bits-pilani.ac.in")
    assert entry.role == "faculty"


async def test_concurrent_duplicate_rows_collapse_to_one_record(tmp_path):
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'concurrent.db'}")
    try:
        await init_models(engine)
        factory = make_session_factory(engine)
        store = SqlCollaborators(factory, max_concurrent_writes=4)

        question_text = "\n".join([QUESTION_HEADER] + ["Acme,Tech,SDE,SQL,Hard,Explain joins,,Yes"] * 3)
        question_report = (await UploadEngine().run(
            UploadKind.QUESTION, question_text, collaborators=store.as_collaborators(),
        )).report

        user_text = "\n".join(
            ["Email,Role,Auth Provider,Name"] + ["prof@pilani.bits-pilani.ac.in,faculty,google,Prof"] * 3
        )
        user_report = (await UploadEngine().run(
            UploadKind.USER, user_text, collaborators=store.as_collaborators(),
        )).report

        assert question_report.success_count == 3
        assert question_report.warnings == []
        assert user_report.success_count == 3
        assert user_report.warnings == []

        async with session_scope(factory) as db:
            assert [q.text for q in await questions.list_questions(db)] == ["Explain joins"]
            assert len(await whitelist.list_entries(db)) == 1
    finally:
        await engine.dispose()
