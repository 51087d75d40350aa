import logging
import time
from typing import List

import requests
import streamlit as st
from openpyxl.utils.exceptions import IllegalCharacterError

from ai_recruiter import settings
from ai_recruiter.frontend.controller import (
    SCORE_FILTERS,
    ViewState,
    group_id,
    page_slice,
    selected_groups,
    total_pages,
    visible_groups,
)
from ai_recruiter.pipeline.chat import ask_about_candidates
from ai_recruiter.pipeline.documents import read_job_description
from ai_recruiter.pipeline.export import (
    build_workbook,
    export_filename,
    export_rows,
    filter_groups,
    group_score,
    stringify,
)
from ai_recruiter.pipeline.graph import AnalysisInputError, run_analysis, validate_run_inputs
from ai_recruiter.pipeline.models import ProgressEvent, ResumeUpload
from ai_recruiter.pipeline.questions import SUGGESTED_QUESTIONS, append_suggested_question, parse_questions
from ai_recruiter.pipeline.scoring import format_score

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger("ai_recruiter.frontend")

# Page configuration
st.set_page_config(
    page_title="AI Recruiter",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS for styling
st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1f2937;
        text-align: center;
        margin-bottom: 2rem;
    }
    .sub-header {
        font-size: 1.2rem;
        color: #6b7280;
        text-align: center;
        margin-bottom: 3rem;
    }
    .score-high {
        color: #059669;
        font-weight: 600;
    }
    .score-medium {
        color: #d97706;
        font-weight: 600;
    }
    .score-low {
        color: #dc2626;
        font-weight: 600;
    }
</style>
""", unsafe_allow_html=True)

SCORING_CRITERIA = [
    ("Skills & Tools Match", 50),
    ("Relevant Experience", 25),
    ("Education / Certifications", 15),
    ("Nice-to-have / Extra Fit", 10),
]


def init_session_state():
    defaults = {
        "groups": [],
        "summary": None,
        "view": ViewState(),
        "question_text": "",
        "resume_page": 1,
        "chat_answers": [],
        "uploader_key": 0,
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value


def get_score_color(score) -> str:
    """Get color class based on score."""
    if score is None:
        return ""
    if score >= 70:
        return "score-high"
    elif score >= 40:
        return "score-medium"
    else:
        return "score-low"


def add_suggestion(suggestion: str):
    st.session_state.question_text = append_suggested_question(st.session_state.question_text, suggestion)


def toggle_selection(gid: str):
    st.session_state.view = st.session_state.view.toggle(gid)


def reset():
    st.session_state.groups = []
    st.session_state.summary = None
    st.session_state.view = ViewState()
    st.session_state.question_text = ""
    st.session_state.resume_page = 1
    st.session_state.chat_answers = []
    # New widget keys clear the file uploaders
    st.session_state.uploader_key += 1


def notify_run_started(resume_count: int):
    """Best-effort notification email; failures never block the run."""
    try:
        response = requests.post(
            f"{settings.API_URL.rstrip('/')}/api/send-email",
            json={"resumeCount": resume_count},
            timeout=30,
        )
        if not response.ok:
            logger.warning("!!! Notification email failed: %s", response.text)
    except requests.exceptions.RequestException as e:
        logger.warning("!!! Notification email failed: %s", e)


def build_resume_uploads(files) -> List[ResumeUpload]:
    stamp = int(time.time() * 1000)
    return [
        ResumeUpload(
            resume_id=f"res{stamp}-{index}",
            file_name=f.name,
            content=f.getvalue(),
            content_type=f.type or "application/octet-stream",
        )
        for index, f in enumerate(files)
    ]


def render_sidebar():
    with st.sidebar:
        st.header("System Status")

        try:
            response = requests.get(f"{settings.API_URL.rstrip('/')}/", timeout=5)
            if response.status_code == 200:
                st.success("Backend API: Connected")
            else:
                st.error("Backend API: Error")
        except requests.exceptions.RequestException:
            st.error("Backend API: Disconnected")

        st.markdown("---")
        st.markdown("### Scoring Criteria")
        for label, points in SCORING_CRITERIA:
            st.markdown(f"- **{label}**: {points} pts")

        st.markdown("---")
        st.markdown("### Instructions")
        st.markdown("""
        1. Upload one or more candidate resumes
        2. Upload the job description document
        3. Enter one question per line (or join them with "?,")
        4. Click 'Run Analysis' and wait for every question to finish
        5. Filter, chat about, or download the results
        """)


def render_resume_list(resume_files):
    per_page = settings.RESUMES_PER_PAGE
    pages = total_pages(len(resume_files), per_page)
    page = min(st.session_state.resume_page, pages)
    for f in page_slice(resume_files, page, per_page):
        st.caption(f"📄 {f.name}")
    if len(resume_files) > per_page:
        col_prev, col_info, col_next = st.columns([1, 2, 1])
        with col_prev:
            if st.button("← Previous", disabled=page <= 1, key="resume_prev"):
                st.session_state.resume_page = page - 1
                st.rerun()
        with col_info:
            st.markdown(f"Page {page} of {pages}")
        with col_next:
            if st.button("Next →", disabled=page >= pages, key="resume_next"):
                st.session_state.resume_page = page + 1
                st.rerun()


def run(resume_files, jd_file, jd_pasted: str):
    resumes = build_resume_uploads(resume_files or [])
    job_description = read_job_description(jd_file.name, jd_file.getvalue()) if jd_file else jd_pasted
    question_text = st.session_state.question_text

    try:
        validate_run_inputs(resumes, job_description, parse_questions(question_text))
    except AnalysisInputError as e:
        st.error(str(e))
        return

    notify_run_started(len(resumes))

    progress_bar = st.progress(0.0)
    status_text = st.empty()

    def on_progress(event: ProgressEvent):
        progress_bar.progress(event.current / event.total)
        status_text.text(f"Processed {event.current} of {event.total}: {event.resume_name} • {event.question}")

    with st.spinner(f"Analyzing {len(resumes)} resume(s)... Each question may take several minutes."):
        final_state = run_analysis(resumes, job_description, question_text, on_progress=on_progress)

    st.session_state.groups = final_state["groups"]
    st.session_state.summary = final_state["summary"]
    st.session_state.view = ViewState()
    st.session_state.chat_answers = []
    status_text.text("Analysis complete!")


def render_summary():
    summary = st.session_state.summary
    if summary is None:
        return
    message = f"{summary.succeeded} of {summary.total} answer(s) received"
    if summary.failed:
        st.warning(f"{message}; {summary.failed} failed. Failed questions are shown per candidate below.")
    else:
        st.success(f"{message}.")


def render_results():
    groups = st.session_state.groups
    if not groups:
        return
    view: ViewState = st.session_state.view

    st.subheader("Candidates")
    labels = list(SCORE_FILTERS.keys())
    current = next((label for label, value in SCORE_FILTERS.items() if value == view.min_score), labels[0])
    choice = st.selectbox("Minimum score", labels, index=labels.index(current))
    if SCORE_FILTERS[choice] != view.min_score:
        st.session_state.view = view = view.with_filter(SCORE_FILTERS[choice])

    matching = filter_groups(groups, view.min_score)
    st.caption(f"{len(matching)} of {len(groups)} candidate(s) shown")

    for group in visible_groups(groups, view, settings.RESUMES_PER_PAGE):
        score = group_score(group)
        gid = group_id(group)
        with st.expander(f"{group.resume_name} • Score: {format_score(score)}"):
            st.checkbox(
                "Select for chat",
                value=gid in view.selected_ids,
                key=f"select_{gid}",
                on_change=toggle_selection,
                args=(gid,),
            )
            if group.processed_at:
                st.caption(f"Processed at {group.processed_at.strftime('%Y-%m-%d %H:%M:%S')}")
            for entry in group.questions:
                st.markdown(f"**Question:** {stringify(entry.question) or '-'}")
                if entry.error:
                    st.error(entry.error)
                answer = stringify(entry.answer)
                if answer:
                    st.markdown(f"**Answer:** {answer}")
                css = get_score_color(entry.extracted_score)
                st.markdown(
                    f'**Score:** <span class="{css}">{format_score(entry.extracted_score)}</span>',
                    unsafe_allow_html=True,
                )
                explanation = stringify(entry.explanation)
                if explanation:
                    st.markdown(f"**Explanation:** {explanation}")
                st.markdown("---")

    pages = total_pages(len(matching), settings.RESUMES_PER_PAGE)
    if pages > 1:
        page = st.number_input("Page", min_value=1, max_value=pages, value=min(view.page, pages), step=1)
        if page != view.page:
            st.session_state.view = view.with_page(int(page))
            st.rerun()

    try:
        workbook = build_workbook(export_rows(matching))
        st.download_button(
            "📥 Download Report",
            data=workbook,
            file_name=export_filename(),
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    except (ValueError, OSError, IllegalCharacterError) as e:
        logger.error("!!! Error exporting to Excel: %s", e)
        st.error("Failed to export to Excel. Please try again.")


def render_chat():
    groups = st.session_state.groups
    if not groups:
        return
    st.subheader("Ask about selected candidates")
    chosen = selected_groups(groups, st.session_state.view)
    st.caption(f"{len(chosen)} candidate(s) selected")
    chat_question = st.text_input("Your question", key="chat_question")
    if st.button("Ask", disabled=not chosen or not chat_question.strip()):
        with st.spinner("Asking the model..."):
            st.session_state.chat_answers = ask_about_candidates(chosen, chat_question)

    for item in st.session_state.chat_answers:
        st.markdown(f"#### {item['candidate']}")
        if item["error"]:
            st.error(item["error"])
        else:
            st.markdown(item["answer"])


def main():
    init_session_state()

    # Header
    st.markdown('<h1 class="main-header">AI Recruiter</h1>', unsafe_allow_html=True)
    st.markdown('<p class="sub-header">Ask the same questions about every candidate</p>', unsafe_allow_html=True)

    render_sidebar()

    col1, col2 = st.columns([1, 1])
    uploader_key = st.session_state.uploader_key

    with col1:
        st.subheader("Candidate Resumes")
        resume_files = st.file_uploader(
            "Upload one or more resumes",
            type=["pdf", "doc", "docx", "txt"],
            key=f"resume_upload_{uploader_key}",
            accept_multiple_files=True,
        )
        if resume_files:
            render_resume_list(resume_files)

    with col2:
        st.subheader("Job Description Document")
        jd_file = st.file_uploader(
            "Upload the job description",
            type=["pdf", "txt", "md"],
            key=f"jd_upload_{uploader_key}",
        )
        jd_pasted = st.text_area("...or paste it here", key=f"jd_text_{uploader_key}", height=120)

    st.subheader("Questions")
    st.text_area(
        "One question per line",
        key="question_text",
        placeholder="Enter your question here... (e.g., What is the candidate ATS score?)",
        height=120,
    )
    st.caption("Suggested Questions:")
    suggestion_cols = st.columns(len(SUGGESTED_QUESTIONS))
    for col, suggestion in zip(suggestion_cols, SUGGESTED_QUESTIONS):
        with col:
            st.button(suggestion, on_click=add_suggestion, args=(suggestion,), use_container_width=True)

    st.markdown("<br>", unsafe_allow_html=True)
    col_run, col_reset = st.columns([1, 1])
    with col_run:
        analyze_button = st.button("🚀 Run Analysis", type="primary", use_container_width=True)
    with col_reset:
        st.button("Reset", on_click=reset, use_container_width=True)

    if analyze_button:
        run(resume_files, jd_file, jd_pasted)

    render_summary()
    render_results()
    render_chat()


if __name__ == "__main__":
    main()
