# File: app/services/stats_service.py

"""
Figures for the administration dashboard.
"""

from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from app.models.analysis import ProjectAnalysis
from app.models.base import as_utc, utcnow
from app.models.domain import Domain
from app.models.llm_key import LlmApiKey
from app.models.project import Project
from app.models.user import User
from app.services.analysis_summary import summarize_analysis
from app.services.reputation_report import sanitize_reputation_report

RECENT_DAYS = 30
STALE_KEY_DAYS = 60
LATEST_COUNT = 5
MIN_COMPETITORS = 3


def _count(db: Session, model, *where) -> int:
    return db.execute(select(func.count()).select_from(model).where(*where)).scalar_one()


def _latest_analyses(db: Session) -> list[dict[str, Any]]:
    runs = db.execute(
        select(ProjectAnalysis)
        .options(joinedload(ProjectAnalysis.project))
        .order_by(ProjectAnalysis.created_at.desc(), ProjectAnalysis.id.desc())
        .limit(LATEST_COUNT)
    ).scalars()

    latest = []
    for run in runs:
        report = sanitize_reputation_report(run.report)
        if report is None:
            continue
        created_at = as_utc(run.created_at)
        latest.append({
            "id": run.id,
            "projectName": run.project.name,
            "createdAt": created_at.isoformat(),
            "summary": summarize_analysis(report, created_at),
        })
    return latest


def _domain_coverage(db: Session) -> list[dict[str, Any]]:
    domains = db.execute(
        select(Domain).options(joinedload(Domain.project)).order_by(Domain.id)
    ).scalars()
    return [
        {
            "id": domain.id,
            "name": domain.name,
            "projectName": domain.project.name,
            "competitorCount": len(domain.competitor_list),
        }
        for domain in domains
    ]


def build_admin_stats(db: Session, now: datetime | None = None) -> dict[str, Any]:
    now = now or utcnow()
    recent = now - timedelta(days=RECENT_DAYS)
    stale = now - timedelta(days=STALE_KEY_DAYS)

    coverage = _domain_coverage(db)
    keys = list(db.execute(select(LlmApiKey).order_by(LlmApiKey.updated_at.desc())).scalars())
    latest_users = db.execute(
        select(User).order_by(User.created_at.desc(), User.id.desc()).limit(LATEST_COUNT)
    ).scalars()

    return {
        "totals": {
            "users": _count(db, User),
            "projects": _count(db, Project),
            "domains": _count(db, Domain),
            "analyses": _count(db, ProjectAnalysis),
        },
        "analyses": {
            "last30Days": _count(db, ProjectAnalysis, ProjectAnalysis.created_at >= recent),
            "latest": _latest_analyses(db),
        },
        "domains": {
            "withoutCompetitors": sum(1 for item in coverage if item["competitorCount"] == 0),
            "alerts": [item for item in coverage if item["competitorCount"] < MIN_COMPETITORS][:LATEST_COUNT],
        },
        "llm": {
            "configured": len(keys),
            "stale": [
                {"provider": key.provider.value, "updatedAt": as_utc(key.updated_at).isoformat()}
                for key in keys
                if as_utc(key.updated_at) < stale
            ],
        },
        "users": {
            "newLast30Days": _count(db, User, User.created_at >= recent),
            "latest": [
                {
                    "id": user.id,
                    "email": user.email,
                    "group": user.group.value,
                    "createdAt": as_utc(user.created_at).isoformat(),
                }
                for user in latest_users
            ],
        },
    }
