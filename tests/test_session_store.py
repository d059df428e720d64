"""
Tests for session storage of the issue and answers
"""

import json

import pytest
from advice_errors import DecodeError
from obfuscation import decode, encode
from session_store import ANSWERS_KEY, ISSUE_KEY, SessionStore, validate_issue


@pytest.fixture
def store():
    return SessionStore({})


class TestSaving:

    def test_save_issue_writes_both_keys(self, store, sample_issue):
        store.save_issue(sample_issue)

        assert decode(store.get(ANSWERS_KEY)) == {'mainIssue': sample_issue}
        assert decode(store.get(ISSUE_KEY)) == sample_issue

    def test_save_issue_keeps_answers(self, store, sample_answers):
        store.save_answers(sample_answers)
        store.save_issue("새로운 문제 설명입니다")

        answers = store.load_answers()
        assert answers['mainIssue'] == "새로운 문제 설명입니다"
        assert answers['incidentDate'] == '2024-03-15'

    def test_values_are_obfuscated(self, store, sample_answers):
        store.save_answers(sample_answers)

        assert "{" not in store.get(ANSWERS_KEY)
        assert sample_answers['mainIssue'] not in store.get(ANSWERS_KEY)

    def test_clear(self, store, sample_answers):
        store.save_answers(sample_answers)
        store.clear()

        assert store.get(ANSWERS_KEY) is None
        assert store.get(ISSUE_KEY) is None


class TestLoading:

    def test_empty_store(self, store):
        assert store.load_answers() == {}
        assert store.load_main_issue() is None

    def test_legacy_plain_json_answers(self, sample_answers):
        store = SessionStore({ANSWERS_KEY: json.dumps(sample_answers, ensure_ascii=False)})

        assert store.load_answers() == sample_answers

    def test_issue_key_fallback(self):
        store = SessionStore({ISSUE_KEY: encode("임금 체불 문제입니다")})

        assert store.load_main_issue() == "임금 체불 문제입니다"

    def test_unreadable_answers_fall_back_to_issue(self):
        store = SessionStore({ANSWERS_KEY: "%%%garbage", ISSUE_KEY: encode("상속 분쟁입니다")})

        assert store.load_answers() == {'mainIssue': "상속 분쟁입니다"}

    def test_analysis_answers(self, store, sample_answers):
        store.save_answers(sample_answers)

        assert store.load_analysis_answers() == sample_answers

    def test_analysis_answers_missing(self, store):
        with pytest.raises(DecodeError):
            store.load_analysis_answers()

    def test_analysis_answers_without_issue(self):
        store = SessionStore({ANSWERS_KEY: encode({'amount': '100만원'})})

        with pytest.raises(DecodeError):
            store.load_analysis_answers()

    def test_analysis_answers_undecodable(self):
        store = SessionStore({ANSWERS_KEY: '{"mainIssue": '})

        with pytest.raises(DecodeError):
            store.load_analysis_answers()


class TestValidateIssue:

    @pytest.mark.parametrize("issue", ["", "   ", "짧음"])
    def test_rejected(self, issue):
        assert validate_issue(issue) is not None

    def test_accepted(self, sample_issue):
        assert validate_issue(sample_issue) is None
