"""
CodePulse - Streamlit Dashboard.

The user interface for the interview prep kit.
Features:
- Job role, job description and resume (paste or PDF upload) inputs
- Full prep kit and randomized practice sets
- Company research briefings with cited sources
- Resume analysis against a job description
- Streaming Mock Interview and Doubt Buster chats
"""

import json
import logging
import sys
from pathlib import Path

import streamlit as st

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from codepulse.app.chat import ChatSession
from codepulse.app.orchestrator import PrepOrchestrator
from codepulse.app.prompt_composer import explain_prompt
from codepulse.core.config import configure_logging, get_settings
from codepulse.core.domain.models import ChatRole, DifficultyLevel, RoleCategory
from codepulse.core.exceptions import ClassifiedError, DocumentError, InputError
from codepulse.infra.utils.pdf_parser import extract_resume_text
from codepulse.ui.async_runner import run_async, stream_into


# Configure logging
configure_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# PAGE CONFIGURATION
# =============================================================================

st.set_page_config(
    page_title="CodePulse - AI Interview Prep",
    page_icon="🎯",
    layout="wide",
    initial_sidebar_state="expanded",
)


st.markdown("""
<style>
    .main-header {
        text-align: center;
        padding: 1rem 0;
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
        font-size: 2.5rem;
        font-weight: 700;
    }

    .source-link {
        font-size: 0.85rem;
        color: #a0a0a0;
    }
</style>
""", unsafe_allow_html=True)


# =============================================================================
# SESSION STATE INITIALIZATION
# =============================================================================

def init_session_state():
    """Initialize Streamlit session state variables."""
    defaults = {
        "orchestrator": None,
        "job_role": "",
        "job_description": "",
        "resume_text": "",
        "prep_kit": None,
        "practice_set": None,
        "company_insights": None,
        "resume_analysis": None,
        "solution_guides": {},
        "mock_session": None,
        "doubt_session": None,
        "pending_doubt": None,
        "errors": {},
    }
    for key, value in defaults.items():
        if key not in st.session_state:
            st.session_state[key] = value

    if st.session_state.orchestrator is None:
        st.session_state.orchestrator = PrepOrchestrator()


def run_feature(feature: str, coro):
    """
    Run a generation feature, recording a displayable error on failure.

    Returns the result, or None if the feature failed.
    """
    st.session_state.errors.pop(feature, None)
    try:
        return run_async(coro)
    except InputError as e:
        st.session_state.errors[feature] = str(e)
    except ClassifiedError as e:
        st.session_state.errors[feature] = e.message
    return None


def show_error(feature: str) -> bool:
    """Show a feature's last error with a retry affordance; True if retry was clicked."""
    message = st.session_state.errors.get(feature)
    if not message:
        return False
    st.error(f"❌ {message}")
    return st.button("🔄 Retry", key=f"retry_{feature}")


init_session_state()
orchestrator: PrepOrchestrator = st.session_state.orchestrator
settings = get_settings()


# =============================================================================
# SIDEBAR - SETUP
# =============================================================================

with st.sidebar:
    st.markdown("## 🧭 Your Target Role")

    st.session_state.job_role = st.text_input(
        "Job role",
        value=st.session_state.job_role,
        placeholder="e.g. Senior Backend Engineer, Content Writer",
    )

    st.markdown("### Job Description (optional)")
    st.session_state.job_description = st.text_area(
        "Paste the job description",
        value=st.session_state.job_description,
        height=150,
        placeholder="Paste the full job description here...",
    )

    st.markdown("### Resume (optional)")
    uploaded_file = st.file_uploader(
        "Upload your resume (PDF)",
        type=["pdf"],
        help="Upload your resume to personalize the generated content",
    )

    if uploaded_file is not None:
        try:
            st.session_state.resume_text = extract_resume_text(uploaded_file.getvalue(), uploaded_file.name)
            st.success(f"✅ Resume loaded: {len(st.session_state.resume_text)} characters")
        except DocumentError as e:
            st.error(f"❌ Failed to parse resume: {e}")

    st.session_state.resume_text = st.text_area(
        "Or paste your resume",
        value=st.session_state.resume_text,
        height=150,
    )

    st.markdown("---")
    st.markdown("### ⚙️ Settings")
    st.info(f"Model: {settings.GEMINI_MODEL}")
    st.info(f"Retries: {settings.RETRY_MAX_ATTEMPTS} attempts, {settings.REQUEST_TIMEOUT_SECONDS:g}s timeout")

    if not settings.api_key:
        st.error("⚠️ GEMINI_API_KEY not set in .env")


# =============================================================================
# MAIN HEADER
# =============================================================================

st.markdown('<h1 class="main-header">🎯 CodePulse</h1>', unsafe_allow_html=True)
st.markdown(
    '<p style="text-align: center; color: #888; margin-bottom: 2rem;">AI-Powered Interview Preparation</p>',
    unsafe_allow_html=True,
)

job_role = st.session_state.job_role
job_description = st.session_state.job_description or None
resume_text = st.session_state.resume_text or None


# =============================================================================
# RENDERING HELPERS
# =============================================================================

def render_questions(title: str, questions, key_prefix: str):
    st.markdown(f"### {title}")
    for i, qa in enumerate(questions):
        with st.expander(f"Q{i + 1}. {qa.question}"):
            st.markdown(qa.answer)
            if st.button("💡 Explain in Doubt Buster", key=f"{key_prefix}_explain_{i}"):
                st.session_state.pending_doubt = explain_prompt(f"{qa.question}\n\n{qa.answer}")
                st.info("Open the Doubt Buster tab to see the explanation.")


def render_challenges(challenges, role_category: RoleCategory, key_prefix: str):
    heading = "✍️ Writing Challenges" if role_category is RoleCategory.CONTENT else "💻 Coding Challenges"
    st.markdown(f"### {heading}")
    for i, challenge in enumerate(challenges):
        with st.expander(f"{i + 1}. {challenge.title}"):
            st.markdown(challenge.problem)
            st.markdown("**Examples**")
            st.markdown(challenge.examples)

            if role_category is RoleCategory.CONTENT:
                st.markdown("**Sample Solution**")
                st.markdown(challenge.solutions.javascript)
                continue

            lang_tabs = st.tabs(["JavaScript", "Python", "Java", "C++"])
            solutions = challenge.solutions
            for tab, (code, lang) in zip(
                lang_tabs,
                [
                    (solutions.javascript, "javascript"),
                    (solutions.python, "python"),
                    (solutions.java, "java"),
                    (solutions.cpp, "cpp"),
                ],
            ):
                with tab:
                    st.code(code, language=lang)


def render_machine_coding(problem, key_prefix: str):
    st.markdown("### 🏗️ Machine Coding Round")
    st.markdown(f"**{problem.title}**")
    st.markdown(problem.problem)

    guides = st.session_state.solution_guides
    feature = f"solution_{key_prefix}"
    if st.button("📘 Generate Solution Guide", key=f"{key_prefix}_guide") or show_error(feature):
        with st.spinner("Writing a step-by-step guide..."):
            guide = run_feature(
                feature,
                orchestrator.generate_machine_coding_solution(problem.title, problem.problem),
            )
        if guide is not None:
            guides[problem.title] = guide.solution_guide
        st.rerun()

    if problem.title in guides:
        with st.expander("Solution Guide", expanded=True):
            st.markdown(guides[problem.title])


def render_chat(session: ChatSession, key: str):
    """Draw the transcript, retry affordances and input box for a chat session."""
    for i, msg in enumerate(session.messages):
        avatar_role = "user" if msg.role is ChatRole.USER else "assistant"
        with st.chat_message(avatar_role):
            if msg.is_error:
                st.warning(msg.text)
                if msg.on_retry is not None and st.button("Retry", key=f"{key}_retry_{i}_{session.session_id}"):
                    stream_into(st.empty(), session.retry())
                    st.rerun()
            else:
                st.markdown(msg.text)

    prompt = st.chat_input("Type your message...", key=f"{key}_input")
    if prompt:
        with st.chat_message("user"):
            st.markdown(prompt)
        with st.chat_message("assistant"):
            stream_into(st.empty(), session.send(prompt))
        st.rerun()

    transcript = session.transcript_markdown()
    if transcript:
        st.download_button(
            "⬇️ Download transcript",
            data=transcript,
            file_name=f"codepulse-{key}-{session.session_id}.md",
            mime="text/markdown",
            key=f"{key}_download",
        )


# =============================================================================
# FEATURE TABS
# =============================================================================

(
    tab_kit,
    tab_random,
    tab_company,
    tab_resume,
    tab_mock,
    tab_doubt,
) = st.tabs([
    "🎯 Prep Kit",
    "🎲 Randomized Set",
    "🏢 Company Insights",
    "📄 Resume Analyzer",
    "🎙️ Mock Interview",
    "💡 Doubt Buster",
])


# -----------------------------------------------------------------------------
# Full Prep Kit
# -----------------------------------------------------------------------------

with tab_kit:
    if st.button("🚀 Generate Prep Kit", type="primary", disabled=not job_role.strip()) or show_error("prep_kit"):
        with st.spinner("🧠 Generating your personalized prep kit..."):
            result = run_feature(
                "prep_kit",
                orchestrator.generate_full_prep_kit(job_role, job_description, resume_text),
            )
        if result is not None:
            st.session_state.prep_kit = result
        st.rerun()

    kit = st.session_state.prep_kit
    if kit is not None:
        render_questions("🗣️ General Questions", kit.general_questions, "kit_general")
        render_questions("🔧 Role-Specific Questions", kit.technical_questions, "kit_technical")
        render_challenges(kit.coding_challenges, kit.role_category, "kit")
        render_machine_coding(kit.machine_coding, "kit")

        st.download_button(
            "⬇️ Download prep kit (JSON)",
            data=json.dumps(kit.to_dict(), indent=2),
            file_name=f"codepulse-prep-{kit.generation_id}.json",
            mime="application/json",
        )


# -----------------------------------------------------------------------------
# Randomized Practice Set
# -----------------------------------------------------------------------------

with tab_random:
    difficulty = st.selectbox(
        "Difficulty",
        options=list(DifficultyLevel),
        format_func=lambda level: level.value,
        index=2,
    )

    if st.button("🎲 Randomize", type="primary", disabled=not job_role.strip()) or show_error("practice_set"):
        with st.spinner(f"🎲 Building a {difficulty.value} practice set..."):
            result = run_feature(
                "practice_set",
                orchestrator.generate_randomized_prep_set(job_role, difficulty, job_description, resume_text),
            )
        if result is not None:
            st.session_state.practice_set = result
        st.rerun()

    practice = st.session_state.practice_set
    if practice is not None:
        st.caption(f"Difficulty: {practice.difficulty.value}")
        render_questions("🗣️ General Questions", practice.general_questions, "rand_general")
        render_questions("🔧 Role-Specific Questions", practice.technical_questions, "rand_technical")
        design_title = (
            "📈 Content Strategy" if practice.role_category is RoleCategory.CONTENT else "🏛️ System Design"
        )
        render_questions(design_title, practice.system_design_questions, "rand_design")
        render_challenges(practice.coding_challenges, practice.role_category, "rand")
        render_machine_coding(practice.machine_coding, "rand")


# -----------------------------------------------------------------------------
# Company Insights
# -----------------------------------------------------------------------------

with tab_company:
    company_name = st.text_input("Company name", placeholder="e.g. Stripe")

    if st.button("🔍 Research", type="primary", disabled=not company_name.strip()) or show_error("company"):
        with st.spinner(f"🔍 Researching {company_name}..."):
            result = run_feature("company", orchestrator.generate_company_insights(company_name))
        if result is not None:
            st.session_state.company_insights = result
        st.rerun()

    insights = st.session_state.company_insights
    if insights is not None:
        st.markdown(f"## {insights.company_name}")
        st.markdown(insights.content)
        if insights.sources:
            st.markdown("#### Sources")
            for source in insights.sources:
                st.markdown(f"- [{source.title}]({source.uri})")


# -----------------------------------------------------------------------------
# Resume Analyzer
# -----------------------------------------------------------------------------

with tab_resume:
    ready = bool(resume_text and job_description)
    if not ready:
        st.warning("📋 Add your resume and a job description in the sidebar to analyze.")

    if st.button("📊 Analyze Resume", type="primary", disabled=not ready) or show_error("resume"):
        with st.spinner("📊 Analyzing your resume..."):
            result = run_feature("resume", orchestrator.analyze_resume(resume_text or "", job_description or ""))
        if result is not None:
            st.session_state.resume_analysis = result
        st.rerun()

    analysis = st.session_state.resume_analysis
    if analysis is not None:
        score_col, ats_col = st.columns([1, 3])
        with score_col:
            st.metric("⭐ Match Score", f"{analysis.match_score:.0f}/100")
        with ats_col:
            st.markdown("**ATS Friendliness**")
            st.markdown(analysis.ats_friendliness)

        st.markdown("#### Summary")
        st.markdown(analysis.resume_summary)
        st.markdown("#### Overall Feedback")
        st.markdown(analysis.overall_feedback)

        strengths_col, improve_col = st.columns(2)
        with strengths_col:
            st.markdown("#### 👍 Strengths")
            st.markdown(analysis.strengths)
        with improve_col:
            st.markdown("#### 💡 Improvements")
            st.markdown(analysis.improvement_suggestions)

        kw_col, missing_col = st.columns(2)
        with kw_col:
            st.markdown("#### JD Keywords")
            st.write(", ".join(analysis.jd_keywords))
        with missing_col:
            st.markdown("#### Missing Keywords")
            st.write(", ".join(analysis.missing_keywords) or "None 🎉")


# -----------------------------------------------------------------------------
# Mock Interview
# -----------------------------------------------------------------------------

with tab_mock:
    col1, col2 = st.columns(2)
    with col1:
        start_clicked = st.button(
            "🎬 Start Interview",
            type="primary",
            disabled=not job_role.strip(),
            use_container_width=True,
        )
    with col2:
        if st.button("🛑 End Interview", use_container_width=True):
            st.session_state.mock_session = None
            st.rerun()

    if start_clicked:
        try:
            session = orchestrator.start_mock_interview(job_role, job_description, resume_text)
        except (InputError, ClassifiedError) as e:
            st.error(f"❌ {e.message}")
        else:
            st.session_state.mock_session = session
            with st.chat_message("assistant"):
                stream_into(st.empty(), session.start())
            st.rerun()

    if st.session_state.mock_session is not None:
        render_chat(st.session_state.mock_session, "mock")


# -----------------------------------------------------------------------------
# Doubt Buster
# -----------------------------------------------------------------------------

with tab_doubt:
    if st.button("🧹 New Chat"):
        st.session_state.doubt_session = None
        st.rerun()

    if st.session_state.doubt_session is None:
        try:
            session = orchestrator.start_doubt_buster()
        except ClassifiedError as e:
            st.error(f"❌ {e.message}")
        else:
            st.session_state.doubt_session = session
            with st.chat_message("assistant"):
                stream_into(st.empty(), session.start())

    doubt_session = st.session_state.doubt_session
    if doubt_session is not None:
        pending = st.session_state.pending_doubt
        if pending:
            st.session_state.pending_doubt = None
            with st.chat_message("assistant"):
                stream_into(st.empty(), doubt_session.send(pending))
            st.rerun()

        render_chat(doubt_session, "doubt")


# =============================================================================
# FOOTER
# =============================================================================

st.markdown("---")
st.markdown(
    '<p style="text-align: center; color: #666; font-size: 0.8rem;">'
    'CodePulse | Built with Streamlit and Gemini'
    '</p>',
    unsafe_allow_html=True,
)
