"""
Per-session storage of the user's issue and answers.

The store is any mutable mapping: Streamlit's st.session_state in the app,
a plain dict in tests. Values are written through the obfuscation codec.
The primary issue is kept under two keys for compatibility with sessions
written by older versions of the app.
"""

from typing import Any, Dict, MutableMapping, Optional

from advice_errors import DecodeError
from advice_request import MAIN_ISSUE_KEY
from obfuscation import encode, load_token

ANSWERS_KEY = "analysisAnswers"
ISSUE_KEY = "legalIssue"

MIN_ISSUE_LENGTH = 5


class SessionStore:
    """Key-value access with codec handling"""

    def __init__(self, backend: Optional[MutableMapping[str, Any]] = None):
        self.backend = backend if backend is not None else {}

    def get(self, key: str) -> Optional[str]:
        value = self.backend.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str):
        self.backend[key] = value

    def clear(self):
        for key in (ANSWERS_KEY, ISSUE_KEY):
            if key in self.backend:
                del self.backend[key]

    def _load(self, key: str) -> Any:
        token = self.get(key)
        if token is None:
            return None
        return load_token(token)

    def load_answers(self) -> Dict[str, str]:
        """
        Stored answer mapping, falling back to the legacy issue key.

        Returns an empty dict when nothing usable is stored; undecodable
        values are treated the same as missing ones.
        """
        answers: Dict[str, str] = {}

        try:
            stored = self._load(ANSWERS_KEY)
        except DecodeError as e:
            print(f"⚠️  Stored answers unreadable: {e}")
            stored = None
        if isinstance(stored, dict):
            answers = {str(k): v for k, v in stored.items() if isinstance(v, str)}

        if not answers.get(MAIN_ISSUE_KEY):
            try:
                issue = self._load(ISSUE_KEY)
            except DecodeError as e:
                print(f"⚠️  Stored issue unreadable: {e}")
                issue = None
            if isinstance(issue, str) and issue:
                answers[MAIN_ISSUE_KEY] = issue

        return answers

    def load_main_issue(self) -> Optional[str]:
        return self.load_answers().get(MAIN_ISSUE_KEY) or None

    def save_issue(self, legal_issue: str):
        """Store a new issue, keeping any answers already collected"""
        answers = self.load_answers()
        answers[MAIN_ISSUE_KEY] = legal_issue
        self.save_answers(answers)

    def save_answers(self, answers: Dict[str, str]):
        """Store the answers; the issue goes to both keys when known"""
        self.set(ANSWERS_KEY, encode(dict(answers)))
        legal_issue = answers.get(MAIN_ISSUE_KEY)
        if legal_issue:
            self.set(ISSUE_KEY, encode(legal_issue))

    def load_analysis_answers(self) -> Dict[str, str]:
        """
        Answers for the results page, read from the primary key only.

        Raises:
            DecodeError: nothing stored, value unreadable, or no issue in it
        """
        token = self.get(ANSWERS_KEY)
        if token is None:
            raise DecodeError("법률 분석 데이터를 찾을 수 없습니다. 상담을 다시 시작해주세요.")

        stored = load_token(token)
        if not isinstance(stored, dict) or not stored.get(MAIN_ISSUE_KEY):
            raise DecodeError("법률 문제 정보가 없습니다. 상담을 다시 시작해주세요.")

        return {str(k): v for k, v in stored.items() if isinstance(v, str)}


def validate_issue(legal_issue: str) -> Optional[str]:
    """Message explaining why an issue cannot be submitted, or None"""
    if not legal_issue or not legal_issue.strip():
        return "법률 문제를 입력해주세요."
    if len(legal_issue.strip()) < MIN_ISSUE_LENGTH:
        return f"법률 문제를 더 자세히 설명해주세요 (최소 {MIN_ISSUE_LENGTH}자 이상)."
    return None
