"""
Demand Paging Simulator — Page Tables, Frame Tables & Replacement

This application provides an interactive simulation and visualization of
demand-paged virtual memory:
    - Dividing jobs into fixed-size pages (with internal fragmentation)
    - Page Tables and Frame Tables kept consistent on every access
    - Page Replacement Algorithms (FIFO, LRU, Aging)
    - Static paging with logical-to-physical address translation

Built with Streamlit for the web interface and Plotly for visualizations.
Run with:  streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import streamlit as st                       # Web application framework
import plotly.graph_objects as go            # Interactive plotting library

from config import (
    DEFAULT_ACCESS_COUNT,
    DEFAULT_FRAME_COUNT,
    DEFAULT_JOB_SIZES,
    DEFAULT_PAGE_SIZE,
    SimulationConfig,
    parse_sequence,
)
from engine import DemandPagingEngine, compare_policies
from errors import PagingError
from paging import Job
from replacement import ReplacementPolicy, make_policy
from translator import StaticPager
from utils import frame_label, get_color, trace_rows
from workload import fixed_accesses

# =============================================================================
# STREAMLIT UI - Web Application Interface
# =============================================================================

st.set_page_config(page_title="Demand Paging Simulator", layout="wide")

# -----------------------------------------------------------------------------
# SIDEBAR NAVIGATION
# -----------------------------------------------------------------------------

page = st.sidebar.radio("Choose View", ["Simulator", "Concepts"])

st.title("Demand Paging Simulator — Page Tables, Frames & Replacement")

# =============================================================================
# CONCEPTS PAGE - Educational Content
# =============================================================================

if page == "Concepts":
    st.header("Operating System Concepts Used in This Project")
    st.markdown(
        """
        ### **1. Paging**
        - A job is divided into fixed-size *pages*; physical memory into *frames* of the same size.
        - The last page of a job may be smaller: the unused rest is **internal fragmentation**.

        ### **2. Page Table**
        - One entry per page of every job, keyed by (job, page).
        - Holds the **valid bit** and the **frame number** of resident pages.

        ### **3. Frame Table**
        - One entry per frame: free, or busy with exactly one (job, page).
        - Frame table and page table always agree in both directions.

        ### **4. Demand Paging**
        - Pages are loaded only when first accessed, so the first touch of a page is always a **page fault**.
        - A fault takes the lowest free frame; if none is left, a page is **evicted**.

        ### **5. Page Replacement Algorithms**
        #### **FIFO (First In First Out)**
        - Evict the page that was loaded earliest. Hits do not change the order.

        #### **LRU (Least Recently Used)**
        - Evict the page whose last access is oldest (exact, via a logical clock).

        #### **Aging**
        - Approximate LRU: an 8-bit register per page is shifted right on every access
          and its top bit set when the page is referenced.

        ### **6. Address Translation**
        - page = address // page size, offset = address % page size
        - physical address = frame start + offset
        """
    )
    st.stop()

# =============================================================================
# SIMULATOR PAGE - Main Interactive Interface
# =============================================================================

# -----------------------------------------------------------------------------
# SIDEBAR - Simulation Settings
# -----------------------------------------------------------------------------

st.sidebar.header("Simulation Settings")

page_size = st.sidebar.number_input("Page size (K)", min_value=1, max_value=4096, value=DEFAULT_PAGE_SIZE)
job_sizes_text = st.sidebar.text_input(
    "Job sizes (K, comma separated)",
    value=",".join(str(s) for s in DEFAULT_JOB_SIZES),
)
frame_count = st.sidebar.number_input("Memory frames", min_value=1, max_value=256, value=DEFAULT_FRAME_COUNT)
access_count = st.sidebar.number_input("Accesses to simulate", min_value=1, max_value=10000, value=DEFAULT_ACCESS_COUNT)
policy = st.sidebar.selectbox("Replacement Policy", options=list(ReplacementPolicy.ALL))
strategy = st.sidebar.selectbox("Access pattern", options=["uniform", "job"],
                                format_func=lambda s: "Uniform over pages" if s == "uniform" else "Job, then page")
seed = st.sidebar.number_input("Random seed", min_value=0, value=42)
verify = st.sidebar.checkbox("Check table consistency on every access", value=True)

st.sidebar.markdown("---")
st.sidebar.header("Access / Workload")
sequence_text = st.sidebar.text_area(
    "Fixed access sequence (job:page, comma separated; empty = random)",
    value="",
)

try:
    job_sizes = [int(x.strip()) for x in job_sizes_text.split(",") if x.strip()]
    config = SimulationConfig(
        page_size=int(page_size),
        jobs=[Job(i, s) for i, s in enumerate(job_sizes)],
        frame_count=int(frame_count),
        access_count=int(access_count),
        policy=policy,
        seed=int(seed),
        verify=verify,
        strategy=strategy,
    )
    sequence = parse_sequence(sequence_text) if sequence_text.strip() else None
except (PagingError, ValueError) as e:
    st.error(str(e))
    st.stop()


def new_engine() -> DemandPagingEngine:
    accesses = fixed_accesses(sequence) if sequence is not None else None
    return DemandPagingEngine(config, make_policy(config.policy), accesses=accesses)


# -----------------------------------------------------------------------------
# SESSION STATE - Engine Persistence
# -----------------------------------------------------------------------------

# A new engine whenever any setting changes
settings_key = (repr(config), sequence_text)
if st.session_state.get("settings_key") != settings_key:
    st.session_state.settings_key = settings_key
    st.session_state.engine = new_engine()
    st.session_state.comparison = None

if st.sidebar.button("Reset Simulation"):
    st.session_state.engine = new_engine()
    st.session_state.comparison = None
    st.sidebar.success("Simulation reset")

engine: DemandPagingEngine = st.session_state.engine

# =============================================================================
# MAIN CONTENT AREA - Two Column Layout
# =============================================================================

col1, col2 = st.columns([1, 2])

# -----------------------------------------------------------------------------
# LEFT COLUMN - Controls and Event Log
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Controls")

    try:
        if st.button("Step Once"):
            outcome = engine.step()
            if outcome is None:
                st.warning("Access sequence exhausted")
            else:
                ev = engine.trace[-1]
                st.success(f"J{ev.job_id} P{ev.page_no} -> {ev.outcome} (frame={ev.frame_no})")

        if st.button("Run Remaining"):
            remaining = config.access_count - engine.accesses_done
            if sequence is not None:
                remaining = len(sequence) - engine.accesses_done
            if remaining <= 0:
                st.warning("No accesses left to run")
            else:
                engine.run(remaining)
                st.success("Run finished")

        if st.button("Compare Policies"):
            st.session_state.comparison = compare_policies(config, ReplacementPolicy.ALL, sequence)
    except PagingError as e:
        st.error(str(e))

    st.subheader("Job Pages")
    for job_id, pages in engine.pages.items():
        frag = engine.fragmentation()[job_id]
        sizes = ", ".join(f"P{p.page_no}: {p.size}K" for p in pages)
        st.write(f"Job {job_id} ({len(pages)} pages) — {sizes}")
        if frag > 0:
            st.caption(f"Internal fragmentation in last page: {frag}K")

    st.subheader("Event Log")
    for ev in engine.event_log[-20:][::-1]:
        st.write(ev)

# -----------------------------------------------------------------------------
# RIGHT COLUMN - Visualizations
# -----------------------------------------------------------------------------

with col2:
    # ----- Physical Frames Visualization -----
    st.subheader("Physical Frames")
    frames, ptable = engine.snapshot()

    fig = go.Figure()
    text = [frame_label(f) for f in frames]
    fig.add_trace(go.Bar(
        x=[f["frame"] for f in frames],
        y=[1] * len(frames),
        text=text,
        marker_color=[get_color(f["job"]) for f in frames],
        hovertext=text,
        hoverinfo="text",
    ))
    fig.update_layout(height=150, showlegend=False, yaxis=dict(showticklabels=False))
    st.plotly_chart(fig, use_container_width=True)

    # ----- Page Table Display -----
    st.subheader("Page Table (snapshot)")
    st.table(ptable)

    # ----- Statistics Display -----
    st.subheader("Statistics")
    if engine.accesses_done == 0:
        st.write("No accesses yet — step or run the simulation")
    else:
        stats = engine.stats().as_dict()
        m1, m2, m3, m4 = st.columns(4)
        m1.metric("Page Accesses", stats["accesses"])
        m2.metric("Page Faults", stats["faults"])
        m3.metric("Fault Rate", stats["fault_rate"])
        m4.metric("Hit Rate", stats["hit_rate"])

        fig2 = go.Figure()
        fig2.add_trace(go.Bar(x=["Hits", "Faults"], y=[stats["hits"], stats["faults"]]))
        fig2.update_layout(height=300, title="Hits vs Faults")
        st.plotly_chart(fig2, use_container_width=True)

        st.subheader("Access Trace")
        st.dataframe(trace_rows(engine.trace), use_container_width=True)

    # ----- FIFO Queue Display -----
    if engine.policy.name == ReplacementPolicy.FIFO:
        st.subheader("Replacement Queue (FIFO order)")
        st.write(engine.policy.queue())

    # ----- Policy Comparison -----
    comparison = st.session_state.get("comparison")
    if comparison:
        st.subheader("Policy Comparison (same access sequence)")
        fig3 = go.Figure()
        fig3.add_trace(go.Bar(name="Faults", x=list(comparison), y=[r.stats.faults for r in comparison.values()]))
        fig3.add_trace(go.Bar(name="Hits", x=list(comparison), y=[r.stats.hits for r in comparison.values()]))
        fig3.update_layout(height=300, barmode="group")
        st.plotly_chart(fig3, use_container_width=True)
        st.table([{"policy": name, **r.stats.as_dict()} for name, r in comparison.items()])

# =============================================================================
# FOOTER - Usage Tips and Examples
# =============================================================================

st.markdown("---")
st.markdown(
    "**Usage tips**:\n"
    "- Set page size, job sizes and frame count, then **Step Once** or **Run Remaining**.\n"
    "- Type a fixed sequence such as `0:0,0:1,0:2,0:0` to replay exact accesses.\n"
    "- **Compare Policies** runs FIFO, LRU and Aging on one shared access sequence."
)

st.markdown("---")
st.markdown(
    "**Instructor examples**:\n"
    "1) FIFO: 2 frames, sequence `0:0,0:1,0:2,0:0` — P0 is evicted first, then faults again.\n"
    "2) LRU: 2 frames, sequence `0:0,0:1,0:0,0:2` — P1 is evicted, P0 stays."
)

# -----------------------------------------------------------------------------
# SIDEBAR - Debug Tools: Static Paging Translation
# -----------------------------------------------------------------------------

st.sidebar.markdown("---")
st.sidebar.header("Debug: Static Translation")

trans_job = st.sidebar.number_input("Job size (K)", min_value=1, value=DEFAULT_JOB_SIZES[0])
trans_addr = st.sidebar.number_input("Logical address", min_value=0, value=0)

if st.sidebar.button("Translate"):
    try:
        pager = StaticPager(Job(0, int(trans_job)), config.page_size, seed=int(seed))
        t = pager.translate_address(int(trans_addr))
        st.sidebar.success(
            f"Page {t.page_no}, offset {t.offset} -> frame {t.frame_no}, physical {t.physical}"
        )
    except PagingError as e:
        st.sidebar.error(str(e))
