"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy.orm import sessionmaker  # noqa: E402

from config import Settings  # noqa: E402
from content_sets.db import ContentStore, create_db_engine, init_db  # noqa: E402
from content_sets.service import ContentSetService  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (require database)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ========================================
# Database
# ========================================


@pytest.fixture
def engine(tmp_path):
    """SQLite engine on a throwaway file, tables created."""
    engine = create_db_engine(f"sqlite:///{tmp_path / 'content_sets.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def store(session_factory):
    return ContentStore(session_factory)


@pytest.fixture
def settings():
    """Settings independent of the environment: no log file, default policies."""
    return Settings(
        database_url="sqlite://",
        log_file=None,
        conflict_policy="last_writer_wins",
        persist_in_transaction=True,
    )


@pytest.fixture
def clock():
    """Fixed clock: 2024-03-01 00:00:00 UTC."""
    return lambda: 1709251200.0


@pytest.fixture
def service(store, settings, clock):
    return ContentSetService(store=store, settings=settings, clock=clock)


# ========================================
# Editable models
# ========================================


def vocabulary_questions_for(term: str, basic: int = 3, supplementary: int = 2) -> list[dict]:
    """Authored vocabulary questions for one term: objective basics, subjective supplements."""
    questions = []
    for i in range(basic):
        questions.append(
            {
                "term": term,
                "questionType": "5지 선다 객관식",
                "difficulty": "일반",
                "question": f"'{term}'의 뜻으로 알맞은 것은? ({i + 1})",
                "options": ["보기 1", "보기 2", "보기 3", "보기 4", "보기 5"],
                "answer": "보기 1",
                "explanation": "정의를 확인합니다.",
            }
        )
    for i in range(supplementary):
        questions.append(
            {
                "term": term,
                "questionType": "단답형 초성 문제",
                "difficulty": "보완",
                "question": f"빈칸에 알맞은 낱말을 쓰세요. ({i + 1})",
                "answer": term,
                "answerInitials": "ㄱㅇ",
                "explanation": "초성을 참고합니다.",
            }
        )
    return questions


def comprehensive_questions_for(types: list[str]) -> list[dict]:
    """One basic and two supplementary comprehensive questions per type."""
    questions = []
    for question_type in types:
        for supplementary in (False, True, True):
            questions.append(
                {
                    "type": question_type,
                    "question": f"{question_type} 문제",
                    "options": ["가", "나", "다", "라", "마"],
                    "answer": "가",
                    "explanation": "지문을 참고합니다.",
                    "isSupplementary": supplementary,
                }
            )
    return questions


@pytest.fixture
def sample_input():
    """Curriculum metadata in the editor's spelling."""
    return {
        "division": "초등학교 중학년(3-4학년)",
        "grade": "4학년",
        "subject": "과학",
        "area": "지구과학",
        "maintopic": "날씨와 기후",
        "subtopic": "기압과 바람",
        "keyword": "기압, 바람",
        "length": "4-5문장으로 구성한 5-6개 단락",
        "textType": "설명문",
    }


@pytest.fixture
def intermediate_payload(sample_input):
    """One passage, ten non-blank paragraphs, three footnotes, no questions."""
    return {
        "input": sample_input,
        "editablePassage": {
            "title": "공기가 누르는 힘, 기압",
            "paragraphs": [f"{i}번째 문단입니다." for i in range(1, 11)],
            "footnote": [
                "기압: 공기가 누르는 힘 (예: 높은 산에서는 기압이 낮다)",
                "바람: 공기의 움직임 (예시: 바람이 분다)",
                "기온: 공기의 온도",
            ],
        },
        "userId": "teacher-01",
    }


@pytest.fixture
def final_payload(intermediate_payload):
    """Complete payload that passes every count check."""
    payload = dict(intermediate_payload)
    payload["vocabularyQuestions"] = vocabulary_questions_for("기압")
    payload["paragraphQuestions"] = [
        {
            "questionType": "빈칸 채우기",
            "paragraphNumber": 1,
            "question": "빈칸에 들어갈 말은?",
            "options": ["기압", "바람", "기온", "구름"],
            "correctAnswer": "1",
        },
        {
            "questionType": "어절 순서 맞추기",
            "paragraphNumber": 1,
            "question": "어절을 순서대로 배열하세요.",
            "wordSegments": ["공기가", "누르는", "힘"],
        },
    ]
    payload["comprehensiveQuestions"] = comprehensive_questions_for(
        ["단답형", "핵심 내용 요약", "정보 확인"]
    )
    return payload


@pytest.fixture
def make_vocabulary_questions():
    return vocabulary_questions_for


@pytest.fixture
def make_comprehensive_questions():
    return comprehensive_questions_for
