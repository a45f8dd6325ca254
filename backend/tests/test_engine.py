"""
End-to-end tests for UploadEngine and its step flows.
"""

import pytest

from prepbank.core.constants import (
    EMPTY_FILE_MESSAGE,
    FILE_ERROR_MESSAGE,
    PipelineStatus,
    UploadKind,
)
from prepbank.pipeline.collaborators import UploadCollaborators
from prepbank.pipeline.engine import UploadEngine, run_upload
from prepbank.pipeline.flow_resolver import FlowResolver
from prepbank.processing.columns import QUESTION_SCHEMA
from prepbank.schemas import Company
from prepbank.validation.header_validator import header_error_message
from tests.conftest import QUESTION_HEADER

RESOURCE_HEADER = "Title,URL,Description,Category,Source,Duration"
USER_HEADER = "Email,Role,Auth Provider,Name"
RECOMMENDATION_HEADER = (
    "Faculty Name,Title,URL,Description,Subject,Goal,Expected Learning,Remarks,Time Estimate"
)


def csv(*lines: str) -> str:
    return "\n".join(lines) + "\n"


@pytest.fixture
def engine() -> UploadEngine:
    return UploadEngine()


# ============================================================================
# Question uploads
# ============================================================================

class TestQuestionUpload:
    async def test_acme_scenario(self, engine, store, collaborators):
        text = csv(
            QUESTION_HEADER,
            "Acme,Tech,SDE,General,Easy,Tell me about yourself,,No",
            "Acme,Tech,SDE,General,Easy,,,No",
        )
        result = await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)

        assert [c.name for c in store.company_calls] == ["Acme"]
        assert result.status == PipelineStatus.COMPLETED
        assert result.report.success_count == 1
        assert result.report.failed_count == 1
        assert result.report.errors == ["Line 3: Missing 'Question' text."]
        assert len(store.questions) == 1
        assert store.questions[0].company_id == store.companies[0].id

    async def test_quoted_question_text(self, engine, store, collaborators):
        text = csv(
            QUESTION_HEADER,
            'Acme,Tech,SDE,Behavioral,Medium,"Describe a project, and its ""impact"".",STAR,Yes',
        )
        report = (await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)).report

        assert report.success_count == 1
        assert store.questions[0].text == 'Describe a project, and its "impact".'
        assert store.questions[0].asked_in_bits is True

    async def test_one_creation_per_distinct_new_company(self, engine, store, collaborators):
        text = csv(
            QUESTION_HEADER,
            "Acme,Tech,SDE,General,Easy,Q1,,No",
            "Beta,Tech,SDE,General,Easy,Q2,,No",
            "Acme,Tech,SDE,General,Easy,Q3,,No",
            "Known,Tech,SDE,General,Easy,Q4,,No",
        )
        report = (await engine.run(
            UploadKind.QUESTION, text,
            collaborators=collaborators,
            known_companies=[Company(id="k1", name="Known")],
        )).report

        assert sorted(c.name for c in store.company_calls) == ["Acme", "Beta"]
        assert report.success_count == 4
        assert store.questions[3].company_id == "k1"

    async def test_unresolved_company_fails_dependent_rows(self, engine, store):
        async def refuse(draft):
            return None

        collaborators = UploadCollaborators(create_company=refuse, create_question=store.create_question)
        text = csv(
            QUESTION_HEADER,
            "Ghost,Tech,SDE,General,Easy,Q1,,No",
            "Ghost,Tech,SDE,General,Easy,Q2,,No",
        )
        report = (await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)).report

        assert report.success_count == 0
        assert report.failed_count == 2
        assert report.errors == [
            "Failed to create company: Ghost",
            "Line 2: Company 'Ghost' could not be found or created.",
            "Line 3: Company 'Ghost' could not be found or created.",
        ]

    async def test_reordered_columns_map_by_header(self, engine, store, collaborators):
        header = ",".join(reversed(QUESTION_SCHEMA.headers))
        text = csv(header, "No,,Why Acme?,Hard,SQL,SDE,Tech,Acme")
        report = (await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)).report

        assert report.success_count == 1
        question = store.questions[0]
        assert question.company_name == "Acme"
        assert question.text == "Why Acme?"
        assert question.difficulty == "Hard"

    async def test_not_enough_fields(self, engine, store, collaborators):
        text = csv(
            QUESTION_HEADER,
            "Acme,Tech,SDE,General,Easy,Q1,,No",
            "Acme,Tech,SDE",
        )
        report = (await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)).report

        assert report.success_count == 1
        assert report.errors == ["Line 3: Not enough fields (found 3, expected min 6)."]

    async def test_progress_checkpoints(self, engine, collaborators):
        seen = []
        text = csv(QUESTION_HEADER, "Acme,Tech,SDE,General,Easy,Q1,,No")
        await engine.run(UploadKind.QUESTION, text, collaborators=collaborators, on_progress=seen.append)

        assert seen == [10, 40, 60, 80, 100]

    async def test_progress_callback_errors_are_ignored(self, engine, collaborators):
        def broken(value):
            raise RuntimeError("ui gone")

        text = csv(QUESTION_HEADER, "Acme,Tech,SDE,General,Easy,Q1,,No")
        result = await engine.run(UploadKind.QUESTION, text, collaborators=collaborators, on_progress=broken)

        assert result.report.success_count == 1


# ============================================================================
# File-level gates
# ============================================================================

class TestFileGates:
    async def test_header_mismatch_fails_whole_batch(self, engine, store, collaborators):
        text = csv(
            "Company,Domain,Role,Topic,Level,Question,Ideal_Approach,Asked_In_BITS",
            "Acme,Tech,SDE,General,Easy,Q1,,No",
            "Beta,Tech,SDE,General,Easy,Q2,,No",
        )
        report = (await engine.run(UploadKind.QUESTION, text, collaborators=collaborators)).report

        assert report.success_count == 0
        assert report.failed_count == 2
        assert report.errors == [header_error_message(QUESTION_SCHEMA.headers)]
        assert store.company_calls == []
        assert store.questions == []

    async def test_header_only_file(self, engine, collaborators):
        report = (await engine.run(UploadKind.QUESTION, csv(QUESTION_HEADER), collaborators=collaborators)).report
        assert report.model_dump() == {
            "success_count": 0,
            "failed_count": 0,
            "errors": [EMPTY_FILE_MESSAGE],
            "warnings": [],
        }

    async def test_empty_file(self, engine, collaborators):
        report = (await engine.run(UploadKind.RESOURCE, "", collaborators=collaborators)).report
        assert report.errors == [EMPTY_FILE_MESSAGE]

    async def test_undecodable_bytes(self, engine, collaborators):
        seen = []
        result = await engine.run(
            UploadKind.RESOURCE, b"\xff\xfe\xfa",
            collaborators=collaborators, on_progress=seen.append,
        )

        assert result.status == PipelineStatus.FAILED
        assert result.report.model_dump() == {
            "success_count": 0,
            "failed_count": 1,
            "errors": [FILE_ERROR_MESSAGE],
            "warnings": [],
        }
        assert seen[-1] == 0

    async def test_missing_path(self, engine, collaborators, tmp_path):
        report = (await engine.run(UploadKind.RESOURCE, tmp_path / "nope.csv", collaborators=collaborators)).report
        assert report.errors == [FILE_ERROR_MESSAGE]

    async def test_strict_csv_rejects_unterminated_quote(self, engine, store, collaborators):
        text = csv(RESOURCE_HEADER, 'Pandas,https://example.com,"open')
        report = (await engine.run(
            UploadKind.RESOURCE, text, collaborators=collaborators, strict_csv=True,
        )).report

        assert report.errors == [FILE_ERROR_MESSAGE]
        assert store.resources == []

    async def test_bom_and_path_source(self, engine, store, collaborators, tmp_path):
        path = tmp_path / "resources.csv"
        path.write_bytes(("\ufeff" + csv(RESOURCE_HEADER, "Pandas,https://example.com,Intro")).encode("utf-8"))

        result = await engine.run(UploadKind.RESOURCE, path, collaborators=collaborators)

        assert result.report.success_count == 1
        assert result.context_summary["filename"] == "resources.csv"
        assert store.resources[0].title == "Pandas"

    async def test_file_name_string_is_not_parsed_as_csv(self, engine, store, collaborators, tmp_path):
        path = tmp_path / "questions.csv"
        path.write_text(csv(QUESTION_HEADER, "Acme,Tech,SDE,General,Easy,Q1,,No"), encoding="utf-8")

        result = await engine.run(UploadKind.QUESTION, str(path), collaborators=collaborators)

        assert result.report.errors == [FILE_ERROR_MESSAGE]
        assert "pass a Path" in result.error
        assert store.company_calls == []

    async def test_single_line_text_is_still_csv(self, engine, collaborators):
        report = (await engine.run(UploadKind.RESOURCE, RESOURCE_HEADER, collaborators=collaborators)).report
        assert report.errors == [EMPTY_FILE_MESSAGE]

    async def test_unknown_kind(self, collaborators):
        report = await run_upload("widget", "a,b\n1,2\n", collaborators=collaborators)
        assert report.failed_count == 1
        assert report.errors == ["Unknown upload kind 'widget'"]


# ============================================================================
# Row isolation and dispatch
# ============================================================================

async def test_malformed_company_result_fails_dependent_rows_only(engine, store):
    async def create_company(draft):
        if draft.name == "Acme":
            return {"id": "c1"}
        return await store.create_company(draft)

    text = csv(
        QUESTION_HEADER,
        "Acme,Tech,SDE,General,Easy,Q1,,No",
        "Beta,Tech,SDE,General,Easy,Q2,,No",
    )
    result = await engine.run(
        UploadKind.QUESTION, text,
        collaborators=UploadCollaborators(
            create_company=create_company, create_question=store.create_question,
        ),
    )

    assert result.status == PipelineStatus.COMPLETED
    assert result.report.success_count == 1
    assert result.report.failed_count == 1
    assert result.report.errors[0].startswith("Error creating company Acme:")
    assert result.report.errors[1] == "Line 2: Company 'Acme' could not be found or created."
    assert [q.company_name for q in store.questions] == ["Beta"]


class TestRowIsolation:
    async def test_sync_callback_error_fails_only_that_row(self, engine):
        saved = []

        def create_resource(resource):
            if resource.title == "Broken":
                raise RuntimeError("disk full")
            saved.append(resource)

        text = csv(
            RESOURCE_HEADER,
            "Pandas,https://example.com/1,",
            "Broken,https://example.com/2,",
            "NumPy,https://example.com/3,",
        )
        report = (await engine.run(
            UploadKind.RESOURCE, text,
            collaborators=UploadCollaborators(create_resource=create_resource),
        )).report

        assert report.success_count == 2
        assert report.failed_count == 1
        assert report.errors == ["Line 3: disk full"]
        assert [r.title for r in saved] == ["Pandas", "NumPy"]

    async def test_async_callback_error_becomes_warning(self, engine):
        async def create_resource(resource):
            if resource.title == "Broken":
                raise RuntimeError("disk full")

        text = csv(
            RESOURCE_HEADER,
            "Pandas,https://example.com/1,",
            "Broken,https://example.com/2,",
        )
        report = (await engine.run(
            UploadKind.RESOURCE, text,
            collaborators=UploadCollaborators(create_resource=create_resource),
        )).report

        assert report.success_count == 2
        assert report.failed_count == 0
        assert report.warnings == ["Line 3: Saving the record failed: disk full"]

    async def test_blank_rows_are_not_counted(self, engine, store, collaborators):
        text = csv(RESOURCE_HEADER, ",,,,,", "Pandas,https://example.com,Intro")
        report = (await engine.run(UploadKind.RESOURCE, text, collaborators=collaborators)).report

        assert report.total == 1
        assert report.success_count == 1

    async def test_record_ids_share_batch_stamp(self, engine, store, collaborators):
        text = csv(RESOURCE_HEADER, "A,https://a,", "B,https://b,")
        await engine.run(UploadKind.RESOURCE, text, collaborators=collaborators)

        first, second = (r.id for r in store.resources)
        assert first.startswith("r_bulk_") and first.endswith("_0")
        assert second.endswith("_1")
        assert first.rsplit("_", 1)[0] == second.rsplit("_", 1)[0]

    async def test_missing_creation_callback(self, engine):
        text = csv(RESOURCE_HEADER, "Pandas,https://example.com,Intro")
        result = await engine.run(UploadKind.RESOURCE, text, collaborators=UploadCollaborators())

        assert result.status == PipelineStatus.FAILED
        assert result.report.errors == [
            "Upload could not be completed: No creation callback configured for 'resource' records"
        ]


# ============================================================================
# Other kinds
# ============================================================================

async def test_recommendation_upload_uses_faculty_fallback(engine, store, collaborators):
    text = csv(
        RECOMMENDATION_HEADER,
        ",Advanced Pandas,https://example.com,Deep dive,Python,Master Dataframes,Complex data",
        "Dr. B,Stats 101,,Basics,Introduction to Statistics,Basics,Inference,,1 Hour",
    )
    report = (await engine.run(
        UploadKind.RECOMMENDATION, text,
        collaborators=collaborators, faculty_name="Dr. A. Sharma",
    )).report

    assert report.success_count == 2
    assert [r.faculty_name for r in store.recommendations] == ["Dr. A. Sharma", "Dr. B"]


async def test_user_upload(engine, store, collaborators):
    text = csv(
        USER_HEADER,
        "faculty@pilani.bits-pilani.ac.in,faculty,google,Prof",
        "outsider@gmail.com,student,google,",
        "guest@example.com,root,email,",
    )
    report = (await engine.run(UploadKind.USER, text, collaborators=collaborators)).report

    assert report.success_count == 1
    assert report.failed_count == 2
    assert report.errors[0].startswith("Line 3: Google sign-in requires")
    assert report.errors[1].startswith("Line 4: Invalid role 'root'")


def test_flow_resolver_lists_every_kind():
    assert set(FlowResolver().list_available_flows()) == {k.value for k in UploadKind}


def test_question_flow_resolves_companies_before_rows():
    names = [s.name for s in FlowResolver().resolve(UploadKind.QUESTION)]
    assert names == ["read_file", "parse_csv", "validate_headers", "resolve_companies", "materialize_rows"]
