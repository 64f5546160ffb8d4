"""
data_loader.py - Centralized data fetching for the Streamlit dashboard.

All reads go through ApiClient.fetch_first so the dashboard works whether the
API base URL points at the server root or at the versioned prefix.
"""

import os
from typing import Any, Dict, List, Optional

import pandas as pd
import streamlit as st

from thesis_app.services.api_client import ApiClient, FetchResult

API_BASE = os.getenv("DASHBOARD_API_URL", "http://localhost:8000")


def get_client() -> ApiClient:
    actor_id = st.session_state.get("actor_id") or None
    return ApiClient(base_url=st.session_state.get("api_base", API_BASE), actor_id=actor_id)


# ---------------------------------------------------------------------------
# Cached API reads
# ---------------------------------------------------------------------------
@st.cache_data(ttl=60)
def check_health(api_base: str) -> Optional[Dict]:
    return ApiClient(base_url=api_base).health()


@st.cache_data(ttl=120)
def load_group_rankings(api_base: str, limit: Optional[int] = None) -> FetchResult:
    return ApiClient(base_url=api_base).group_rankings(limit)


@st.cache_data(ttl=120)
def load_student_rankings(api_base: str, limit: Optional[int] = None) -> FetchResult:
    return ApiClient(base_url=api_base).student_rankings(limit)


@st.cache_data(ttl=300)
def load_reports_summary(api_base: str, days: int = 30) -> FetchResult:
    return ApiClient(base_url=api_base).reports_summary(days)


@st.cache_data(ttl=60)
def load_evaluations(api_base: str, status: Optional[str] = None) -> FetchResult:
    return ApiClient(base_url=api_base).evaluations(status=status, limit=200)


def load_evaluation_detail(api_base: str, evaluation_id: str) -> FetchResult:
    return ApiClient(base_url=api_base).evaluation_detail(evaluation_id)


# ---------------------------------------------------------------------------
# DataFrame builders
# ---------------------------------------------------------------------------
def _items(result: FetchResult) -> List[Dict[str, Any]]:
    data = result.data
    if isinstance(data, dict):
        return data.get("items") or []
    if isinstance(data, list):
        return data
    return []


def group_rankings_df(result: FetchResult) -> pd.DataFrame:
    rows = _items(result)
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    df = df.rename(columns={
        "rank": "Rank",
        "group_title": "Group",
        "group_percentage": "Percentage",
        "submitted_evaluations": "Evaluations",
        "latest_defense_at": "Latest Defense",
    })
    return df[[c for c in ["Rank", "Group", "Percentage", "Evaluations", "Latest Defense"] if c in df.columns]]


def student_rankings_df(result: FetchResult) -> pd.DataFrame:
    rows = _items(result)
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    df = df.rename(columns={
        "rank": "Rank",
        "student_name": "Student",
        "student_email": "Email",
        "group_title": "Group",
        "student_percentage": "Percentage",
        "submitted_evaluations": "Evaluations",
        "latest_defense_at": "Latest Defense",
    })
    cols = ["Rank", "Student", "Email", "Group", "Percentage", "Evaluations", "Latest Defense"]
    return df[[c for c in cols if c in df.columns]]


def criteria_df(detail: Dict[str, Any]) -> pd.DataFrame:
    rows = detail.get("criteria") or []
    if not rows:
        return pd.DataFrame()
    df = pd.DataFrame(rows)
    keep = ["criterion", "weight", "min_score", "max_score", "score", "comment"]
    return df[[c for c in keep if c in df.columns]].rename(columns={
        "criterion": "Criterion",
        "weight": "Weight",
        "min_score": "Min",
        "max_score": "Max",
        "score": "Score",
        "comment": "Comment",
    })


def buckets_df(buckets: List[Dict[str, Any]], label: str) -> pd.DataFrame:
    if not buckets:
        return pd.DataFrame(columns=[label, "Count"])
    return pd.DataFrame(buckets).rename(columns={"key": label, "count": "Count"})
