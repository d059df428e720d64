import streamlit as st
import os
from datetime import datetime
from dotenv import load_dotenv

from advice_errors import ConfigurationError
from advice_models import TitledItem
from advice_request import QUESTIONS, MAIN_ISSUE_KEY, missing_required_answers
from gemini_client import create_client_from_env
from orchestrator import AdviceOrchestrator, WorkflowStatus
from rendering import category_badge_html, emphasized_paragraphs, issue_box_html
from segmentation import TextSegmenter, strip_list_marker
from session_store import SessionStore, validate_issue

# Load environment variables
load_dotenv()

# Page configuration
st.set_page_config(
    page_title="AI 법률 상담",
    page_icon="⚖️",
    layout="centered",
    initial_sidebar_state="collapsed"
)

# Custom CSS
st.markdown("""
<style>
    .main-header {
        font-size: 2.2em;
        color: #1f77b4;
        text-align: center;
        margin-bottom: 20px;
    }
    .issue-box {
        background-color: #f0f2f6;
        padding: 15px;
        border-radius: 10px;
        margin-bottom: 15px;
    }
    .category-badge {
        background-color: #e8f0fe;
        color: #1a56db;
        padding: 4px 10px;
        border-radius: 12px;
        font-size: 0.9em;
    }
</style>
""", unsafe_allow_html=True)


def initialize_session_state():
    """Initialize session state variables"""
    if 'page' not in st.session_state:
        st.session_state.page = 'home'
    if 'orchestrator' not in st.session_state:
        st.session_state.orchestrator = None
    if 'workflow_state' not in st.session_state:
        st.session_state.workflow_state = None
    if 'show_expert_advice' not in st.session_state:
        st.session_state.show_expert_advice = False


def go_to(page: str):
    st.session_state.page = page
    st.rerun()


def setup_orchestrator() -> bool:
    """Create the Gemini client once per session"""
    if st.session_state.orchestrator is not None:
        return True
    try:
        with st.spinner("Gemini 클라이언트를 초기화하는 중..."):
            st.session_state.orchestrator = AdviceOrchestrator(create_client_from_env())
        return True
    except ConfigurationError as e:
        st.error(str(e))
        return False


def display_home():
    st.markdown('<h1 class="main-header">⚖️ 지금 바로 법률 상담을 시작하세요</h1>', unsafe_allow_html=True)
    st.write("복잡한 법률 문제에 혼자 고민하지 마세요. 생성형 AI 기반 법률 상담 서비스로 빠르고 정확한 조언을 받아보세요.")
    st.caption("본 서비스의 조언은 참고용이며 법률 전문가의 상담을 대체하지 않습니다.")
    if st.button("법률 상담 시작하기", type="primary"):
        go_to('consult')


def display_consult(store: SessionStore):
    st.markdown("### 📝 법률 문제 설명")
    legal_issue = st.text_area(
        "어떤 법률 문제로 도움이 필요하신가요?",
        value=store.load_main_issue() or "",
        height=200
    )

    if st.button("다음 단계", type="primary"):
        error = validate_issue(legal_issue)
        if error:
            st.error(error)
            return
        store.save_issue(legal_issue.strip())
        go_to('analyze')


def display_analyze(store: SessionStore):
    answers = store.load_answers()
    legal_issue = answers.get(MAIN_ISSUE_KEY)
    if not legal_issue:
        st.error("법률 문제 정보를 찾을 수 없습니다. 상담을 다시 시작해주세요.")
        if st.button("상담 페이지로 돌아가기"):
            go_to('consult')
        return

    st.markdown("### 🔍 추가 정보")
    st.write("더 정확한 법률 분석을 위해 추가 정보를 입력해주세요. 필수 항목만 작성하거나 원하는 질문만 선택하여 답변할 수 있습니다.")
    st.markdown(issue_box_html(legal_issue), unsafe_allow_html=True)

    selected = {}
    new_answers = dict(answers)
    for question in QUESTIONS:
        qid = question['id']
        label = question['text'] + (" *" if question['required'] else "")
        selected[qid] = st.checkbox(
            label,
            value=question['required'] or bool(answers.get(qid)),
            disabled=question['required'],
            key=f"select-{qid}"
        )
        if not selected[qid]:
            continue
        if question['type'] == 'textarea':
            new_answers[qid] = st.text_area("답변", value=answers.get(qid, ""), key=qid, label_visibility="collapsed")
        else:
            new_answers[qid] = st.text_input("답변", value=answers.get(qid, ""), key=qid, label_visibility="collapsed",
                                             placeholder="YYYY-MM-DD" if question['type'] == 'date' else "답변을 입력해주세요")

    if st.button("법률 분석 시작하기", type="primary"):
        if missing_required_answers(new_answers, selected):
            st.error("필수 질문에 모두 답변해주세요.")
            return
        new_answers = {k: v for k, v in new_answers.items() if k == MAIN_ISSUE_KEY or selected.get(k)}
        store.save_answers(new_answers)
        st.session_state.workflow_state = None
        go_to('result')


def render_analysis_item(item: TitledItem):
    with st.expander(item.title or "법률 분석", expanded=True):
        for paragraph in emphasized_paragraphs(item.title, item.content):
            st.markdown(paragraph)


def render_list_item(item: TitledItem, segmenter: TextSegmenter):
    with st.expander(item.title or "권장 사항", expanded=True):
        items = segmenter.split_numbered_list(item.content)
        if len(items) > 1:
            for index, entry in enumerate(items, start=1):
                st.markdown(f"{index}. {strip_list_marker(entry)}")
        else:
            st.write(item.content)


def display_expert_advice(orchestrator: AdviceOrchestrator, state):
    st.markdown("### 🧑‍⚖️ AI변호사의 조언")
    if state.expert_advice is None:
        with st.spinner("전문 조언을 생성하는 중..."):
            orchestrator.request_expert_advice(state)

    for section in orchestrator.expert_advice_sections(state):
        if section.title:
            st.markdown(f"#### {section.title}")
        for paragraph in section.content:
            st.write(paragraph)

    if st.button("닫기"):
        st.session_state.show_expert_advice = False
        st.rerun()


def display_result(store: SessionStore):
    if not setup_orchestrator():
        return
    orchestrator = st.session_state.orchestrator

    state = st.session_state.workflow_state
    if state is None:
        state = orchestrator.start_from_store(store)
        if state.status != WorkflowStatus.FAILED:
            with st.spinner("법률 조언을 생성하는 중..."):
                try:
                    orchestrator.run_analysis(state)
                except ConfigurationError as e:
                    st.error(str(e))
                    return
        st.session_state.workflow_state = state

    if state.advice is None:
        message = state.errors[-1]['message'] if state.errors else "법률 조언을 생성하는 중 오류가 발생했습니다."
        st.error(message)
        col1, col2 = st.columns(2)
        with col1:
            if st.button("상담 다시 시작"):
                st.session_state.workflow_state = None
                go_to('consult')
        with col2:
            if state.legal_issue and st.button("다시 시도하기", type="primary"):
                with st.spinner("법률 조언을 다시 생성하는 중..."):
                    orchestrator.retry_analysis(state)
                st.rerun()
        st.caption("문제가 지속된다면 법률 문제를 간결하고 명확하게 설명해 보세요.")
        return

    advice = state.advice
    segmenter = orchestrator.segmenter_for(state)

    st.markdown('<h2 class="main-header">법률 자문 결과</h2>', unsafe_allow_html=True)
    st.caption(f"{datetime.now().strftime('%Y년 %m월 %d일')}에 생성된 법률 자문")
    st.markdown(category_badge_html(advice.category), unsafe_allow_html=True)

    st.markdown("### 요약")
    st.write(advice.summary)

    st.markdown("### 법률 분석")
    for item in advice.legalAnalysis:
        render_analysis_item(item)

    st.markdown("### 대응 방안")
    for item in advice.recommendations:
        render_list_item(item, segmenter)

    st.markdown("### 권장 다음 단계")
    for index, step in enumerate(segmenter.split_numbered_list(advice.nextSteps), start=1):
        st.markdown(f"{index}. {strip_list_marker(step)}")

    if st.button("AI변호사 조언 받기", disabled=state.expert_advice_in_progress):
        st.session_state.show_expert_advice = True

    if st.session_state.show_expert_advice:
        display_expert_advice(orchestrator, state)

    if os.getenv('ADVICE_DEBUG'):
        with st.expander("🛠️ Diagnostics"):
            st.json(orchestrator.get_summary(state))
            st.json(state.diagnostics)

    if st.button("홈으로 돌아가기"):
        st.session_state.workflow_state = None
        st.session_state.show_expert_advice = False
        go_to('home')


def main():
    initialize_session_state()
    store = SessionStore(st.session_state)

    page = st.session_state.page
    if page == 'consult':
        display_consult(store)
    elif page == 'analyze':
        display_analyze(store)
    elif page == 'result':
        display_result(store)
    else:
        display_home()


if __name__ == "__main__":
    main()
