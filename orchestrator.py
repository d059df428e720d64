"""
Orchestrator for the legal advice assistant.

Coordinates one consultation:
stored answers -> Gemini analysis -> StructuredAdvice -> (optional) expert advice

The state object keeps an audit trail of every step, plus the diagnostic
events emitted by the segmentation engine while the results are rendered.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from advice_errors import AdviceError, ConfigurationError, DecodeError, ProviderError
from advice_models import AdviceSection, StructuredAdvice
from advice_request import MAIN_ISSUE_KEY
from gemini_client import AdviceGeminiClient
from segmentation import TextSegmenter
from session_store import SessionStore

EXPERT_ADVICE_FAILED = "변호사 조언을 생성하는 중 오류가 발생했습니다. 다시 시도해주세요."
ANALYSIS_FAILED = "법률 조언을 생성하는 중 오류가 발생했습니다. 다시 시도해주세요."


class WorkflowStatus(Enum):
    """Consultation status"""
    PENDING = "pending"
    ANALYZING = "analyzing"
    COMPLETED = "completed"
    FAILED = "failed"


class WorkflowState:
    """
    State of a single consultation

    Holds the inputs, the advice, the expert advice and the audit trail.
    Nothing here is persisted; it lives as long as the results view.
    """

    def __init__(self, session_id: Optional[str] = None):
        """
        Initialize workflow state

        Args:
            session_id: Unique session identifier (auto-generated if not provided)
        """
        self.session_id = session_id or self._generate_session_id()
        self.status = WorkflowStatus.PENDING
        self.created_at = datetime.now().isoformat()
        self.updated_at = self.created_at

        # Inputs
        self.legal_issue = None
        self.answers = {}

        # Outputs
        self.advice: Optional[StructuredAdvice] = None
        self.expert_advice: Optional[str] = None
        self.expert_advice_in_progress = False
        self.retry_count = 0

        self.errors = []
        self.execution_log = []
        self.diagnostics = []

    def _generate_session_id(self) -> str:
        """Generate unique session ID"""
        from uuid import uuid4
        return f"session_{datetime.now().strftime('%Y%m%d_%H%M%S')}_{str(uuid4())[:8]}"

    def log_step(self, step_name: str, status: str, details: Optional[str] = None):
        """
        Log a workflow step

        Args:
            step_name: Name of the workflow step
            status: Status (success/error)
            details: Optional details or error message
        """
        log_entry = {
            'step': step_name,
            'status': status,
            'details': details,
            'timestamp': datetime.now().isoformat()
        }
        self.execution_log.append(log_entry)
        self.updated_at = datetime.now().isoformat()

    def add_error(self, error_message: str, step: Optional[str] = None):
        """Add error to state"""
        error_entry = {
            'message': error_message,
            'step': step,
            'timestamp': datetime.now().isoformat()
        }
        self.errors.append(error_entry)
        self.log_step(step or 'unknown', 'error', error_message)

    def record_event(self, event: Dict[str, Any]):
        """Segmentation diagnostic sink"""
        self.diagnostics.append(dict(event, timestamp=datetime.now().isoformat()))

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to dictionary"""
        return {
            'session_id': self.session_id,
            'status': self.status.value,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'inputs': {
                'legal_issue': self.legal_issue,
                'answers': self.answers
            },
            'outputs': {
                'advice': self.advice.to_dict() if self.advice else None,
                'expert_advice': self.expert_advice
            },
            'errors': self.errors,
            'execution_log': self.execution_log,
            'diagnostics': self.diagnostics
        }


class AdviceOrchestrator:
    """
    Runs the analysis and expert advice calls for one consultation
    """

    def __init__(self, gemini_client: AdviceGeminiClient):
        """
        Args:
            gemini_client: Initialized AdviceGeminiClient
        """
        self.gemini_client = gemini_client

    def start_from_store(self, store: SessionStore, session_id: Optional[str] = None) -> WorkflowState:
        """
        Build a state from the session store.

        A missing or unreadable value is recorded as an error and leaves the
        state FAILED with no issue; the UI then restarts the consultation.
        """
        state = WorkflowState(session_id=session_id)
        try:
            answers = store.load_analysis_answers()
        except DecodeError as e:
            state.status = WorkflowStatus.FAILED
            state.add_error(str(e), step='load')
            print(f"❌ Could not load consultation data: {e}")
            return state

        state.answers = answers
        state.legal_issue = answers.get(MAIN_ISSUE_KEY)
        state.log_step('load', 'success', f"Loaded {len(answers)} answer field(s)")
        return state

    def run_analysis(self, state: WorkflowState) -> WorkflowState:
        """
        Request the structured analysis.

        ConfigurationError propagates (blocking). ProviderError is recorded
        and leaves the state FAILED so the user can retry.
        """
        print(f"🚀 Starting legal analysis (Session: {state.session_id})")
        state.status = WorkflowStatus.ANALYZING

        try:
            advice = self.gemini_client.generate_legal_advice(state.legal_issue or "", state.answers)
        except ConfigurationError as e:
            state.status = WorkflowStatus.FAILED
            state.add_error(str(e), step='analysis')
            raise
        except ProviderError as e:
            state.status = WorkflowStatus.FAILED
            state.add_error(f"{ANALYSIS_FAILED} ({e})", step='analysis')
            print(f"❌ Analysis failed: {e}")
            return state

        state.advice = advice
        state.status = WorkflowStatus.COMPLETED
        state.log_step(
            'analysis', 'success',
            f"Category: {advice.category}, {len(advice.legalAnalysis)} analysis item(s)"
        )
        print(f"✅ Analysis completed (Session: {state.session_id})")
        return state

    def retry_analysis(self, state: WorkflowState) -> WorkflowState:
        """Run the analysis again after a user-triggered retry"""
        state.retry_count += 1
        return self.run_analysis(state)

    def request_expert_advice(self, state: WorkflowState) -> Optional[str]:
        """
        Request expert advice prose for a completed analysis.

        Returns None without calling the provider when there is no advice
        yet or a request is already in progress.
        """
        if state.advice is None or state.expert_advice_in_progress:
            return None

        state.expert_advice_in_progress = True
        try:
            state.expert_advice = self.gemini_client.generate_expert_advice(
                state.legal_issue or "", state.advice
            )
            state.log_step('expert_advice', 'success', f"{len(state.expert_advice)} characters")
        except AdviceError as e:
            state.expert_advice = EXPERT_ADVICE_FAILED
            state.add_error(f"Expert advice failed: {e}", step='expert_advice')
            print(f"❌ Expert advice failed: {e}")
        finally:
            state.expert_advice_in_progress = False

        return state.expert_advice

    def segmenter_for(self, state: WorkflowState) -> TextSegmenter:
        """Segmenter whose diagnostics go to the state"""
        return TextSegmenter(event_sink=state.record_event)

    def expert_advice_sections(self, state: WorkflowState) -> List[AdviceSection]:
        return self.segmenter_for(state).split_advice_sections(state.expert_advice or "")

    def get_summary(self, state: WorkflowState) -> Dict[str, Any]:
        """
        Get consultation summary

        Args:
            state: WorkflowState

        Returns:
            Summary dictionary
        """
        summary = {
            'session_id': state.session_id,
            'status': state.status.value,
            'execution_time': state.updated_at,
            'steps_completed': len([log for log in state.execution_log if log['status'] == 'success']),
            'errors_count': len(state.errors),
            'retry_count': state.retry_count,
        }

        if state.advice:
            summary['category'] = state.advice.category
            summary['analysis_items'] = len(state.advice.legalAnalysis)
            summary['recommendations'] = len(state.advice.recommendations)
        else:
            summary['category'] = None

        summary['expert_advice_generated'] = bool(state.expert_advice)
        return summary


def run_legal_analysis(store: SessionStore, gemini_client: AdviceGeminiClient) -> WorkflowState:
    """
    Convenience function: load stored answers and run the analysis

    Args:
        store: Session store holding the consultation
        gemini_client: Initialized Gemini client

    Returns:
        WorkflowState with results
    """
    orchestrator = AdviceOrchestrator(gemini_client)
    state = orchestrator.start_from_store(store)
    if state.status == WorkflowStatus.FAILED:
        return state
    return orchestrator.run_analysis(state)
