import json as _json

import streamlit as st

st.set_page_config(
    page_title="Thesis Defense Platform",
    page_icon="🎓",
    layout="wide",
    initial_sidebar_state="expanded",
)

from data_loader import (
    API_BASE,
    buckets_df,
    check_health,
    criteria_df,
    group_rankings_df,
    load_evaluation_detail,
    load_evaluations,
    load_group_rankings,
    load_reports_summary,
    load_student_rankings,
    student_rankings_df,
)
from components.charts import (
    criterion_score_chart,
    daily_activity_chart,
    rankings_bar_chart,
    status_pie_chart,
)

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.markdown("## 🎓 Thesis Defense Platform")
st.sidebar.caption("Defense scheduling, panel scoring and rankings")
st.sidebar.divider()

api_base = st.sidebar.text_input("API base URL", value=st.session_state.get("api_base", API_BASE))
st.session_state["api_base"] = api_base

page = st.sidebar.radio(
    "Navigate",
    [
        "🏆 Rankings",
        "📝 Evaluations",
        "📊 Reports",
    ],
)

st.sidebar.divider()
health = check_health(api_base)
if health and health.get("status") == "healthy":
    st.sidebar.success("API healthy")
elif health:
    st.sidebar.warning(f"API {health.get('status', 'unknown')}")
else:
    st.sidebar.error("API unreachable")

if st.sidebar.button("🔄 Refresh"):
    st.cache_data.clear()
    st.rerun()


def _show_errors(result) -> None:
    for err in result.errors:
        st.caption(f"⚠️ {err}")


# ═══════════════════════════════════════════════════════════════════════════
# PAGE 1: RANKINGS
# ═══════════════════════════════════════════════════════════════════════════
if page == "🏆 Rankings":
    st.title("🏆 Rankings")
    st.caption("Computed from submitted and locked panel evaluations")

    limit = st.slider("Show top", min_value=5, max_value=100, value=20, step=5)
    tab1, tab2 = st.tabs(["Groups", "Students"])

    with tab1:
        result = load_group_rankings(api_base, limit)
        df = group_rankings_df(result)
        if df.empty:
            st.info("No group rankings yet.")
            _show_errors(result)
        else:
            total = result.data.get("total", len(df)) if isinstance(result.data, dict) else len(df)
            c1, c2, c3 = st.columns(3)
            c1.metric("Ranked Groups", total)
            c2.metric("Top Percentage", f"{df['Percentage'].max():.2f}%")
            c3.metric("Average", f"{df['Percentage'].mean():.2f}%")
            st.plotly_chart(rankings_bar_chart(df, "Group", "Group Leaderboard"), use_container_width=True)
            st.dataframe(df, use_container_width=True, hide_index=True)

    with tab2:
        result = load_student_rankings(api_base, limit)
        df = student_rankings_df(result)
        if df.empty:
            st.info("No student rankings yet.")
            _show_errors(result)
        else:
            st.plotly_chart(rankings_bar_chart(df, "Student", "Student Leaderboard"), use_container_width=True)
            st.dataframe(df, use_container_width=True, hide_index=True)


# ═══════════════════════════════════════════════════════════════════════════
# PAGE 2: EVALUATIONS
# ═══════════════════════════════════════════════════════════════════════════
elif page == "📝 Evaluations":
    st.title("📝 Evaluations")

    status = st.selectbox("Status", ["", "pending", "in_progress", "submitted", "locked"])
    result = load_evaluations(api_base, status or None)
    items = (result.data or {}).get("items", []) if isinstance(result.data, dict) else []
    if not items:
        st.info("No evaluations found.")
        _show_errors(result)
        st.stop()

    labels = {
        f"{e.get('evaluator_name') or e['evaluator_id']} · {e['status']} · {e['id'][:8]}": e["id"]
        for e in items
    }
    choice = st.selectbox("Evaluation", list(labels.keys()))
    detail_result = load_evaluation_detail(api_base, labels[choice])
    if not detail_result.ok:
        st.error("Could not load evaluation detail.")
        _show_errors(detail_result)
        st.stop()

    detail = detail_result.data
    summary = detail.get("summary") or {}
    percentage = detail.get("percentage") or {}

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Scored", f"{summary.get('scored_count', 0)}/{summary.get('rows', 0)}")
    avg = summary.get("weighted_average")
    c2.metric("Weighted Average", f"{avg:.2f}" if avg is not None else "—")
    pct = percentage.get("overall_percentage")
    c3.metric("Percentage", f"{pct:.2f}%" if pct is not None else "—")
    c4.metric("Status", detail.get("evaluation", {}).get("status", "—"))

    df = criteria_df(detail)
    if not df.empty:
        st.plotly_chart(criterion_score_chart(df), use_container_width=True)
        st.dataframe(df, use_container_width=True, hide_index=True)

    with st.expander("Raw JSON", expanded=False):
        st.code(_json.dumps(detail, indent=2, default=str), language="json")


# ═══════════════════════════════════════════════════════════════════════════
# PAGE 3: REPORTS
# ═══════════════════════════════════════════════════════════════════════════
elif page == "📊 Reports":
    st.title("📊 Reports")

    days = st.slider("Window (days)", min_value=1, max_value=365, value=30)
    result = load_reports_summary(api_base, days)
    if not result.ok:
        st.error("Reports summary unavailable.")
        _show_errors(result)
        st.stop()

    data = result.data
    rng = data.get("range", {})
    st.caption(f"{rng.get('from')} → {rng.get('to')}")

    users = data.get("users", {})
    thesis = data.get("thesis", {})
    defenses = data.get("defenses", {})
    audit = data.get("audit", {})

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Users", users.get("total", 0))
    c2.metric("Thesis Groups", thesis.get("groups_total", 0))
    c3.metric("Defenses in Range", defenses.get("total_in_range", 0))
    c4.metric("Audit Entries", audit.get("total_in_range", 0))

    col1, col2 = st.columns(2)
    with col1:
        df = buckets_df(defenses.get("by_status", []), "Status")
        if not df.empty:
            st.plotly_chart(status_pie_chart(df, "Defenses by Status"), use_container_width=True)
    with col2:
        panel = data.get("evaluations", {}).get("panel", {})
        df = buckets_df(panel.get("by_status", []), "Status")
        if not df.empty:
            st.plotly_chart(status_pie_chart(df, "Panel Evaluations by Status"), use_container_width=True)

    daily = buckets_df(audit.get("daily", []), "Day")
    if not daily.empty:
        st.plotly_chart(daily_activity_chart(daily), use_container_width=True)

    st.subheader("Top Actions")
    st.dataframe(buckets_df(audit.get("top_actions", []), "Action"), use_container_width=True, hide_index=True)
