# File: app/services/analysis_service.py

"""
Reputation analysis runs.

  - Build the prompt from the project profile and its domains' competitors
  - Call the Responses API with the report JSON schema and web search
  - Decode, sanitize and store the report
  - Read back the latest run and the run history
"""

import logging
from typing import Any, Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.analysis import ProjectAnalysis
from app.models.base import as_utc
from app.models.domain import Domain
from app.models.project import Project
from app.models.user import User
from app.services.analysis_summary import summarize_analysis
from app.services.llm_client import (
    LlmClient,
    LlmResponseError,
    extract_response_json,
    extract_response_text,
)
from app.services.llm_json import LlmJsonError, parse_llm_json
from app.services.prompts import build_reputation_prompt
from app.services.reputation_report import (
    REPUTATION_ANALYSIS_JSON_SCHEMA,
    sanitize_reputation_report,
)
from app.services.text_utils import extract_competitor_names, normalize_website

logger = logging.getLogger(__name__)

DEFAULT_COMPANY = "Entreprise"
MISSING_CITY = "Non renseignée"
MISSING_WEBSITE = "Non renseigné"
MISSING_COMPETITOR = "Non fourni"
CONTEXT_COMPETITORS = 5


def collect_competitors(domains: Iterable[Domain]) -> list[str]:
    names: list[str] = []
    seen: set[str] = set()
    for domain in domains:
        for name in extract_competitor_names(domain.competitors):
            if name not in seen:
                seen.add(name)
                names.append(name)
    return names


def build_analysis_context(
    project: Project,
    domains: Iterable[Domain],
) -> tuple[str, dict[str, Any]]:
    """Return the filled-in prompt and the context stored alongside the run."""
    competitors = collect_competitors(domains)
    website = normalize_website(project.website_url)
    company_name = (project.name or "").strip() or DEFAULT_COMPANY

    prompt = build_reputation_prompt(
        company_name=company_name,
        website=f"[{website}]({website})" if website else MISSING_WEBSITE,
        competitor1=competitors[0] if len(competitors) > 0 else MISSING_COMPETITOR,
        competitor2=competitors[1] if len(competitors) > 1 else MISSING_COMPETITOR,
        city=(project.city or "").strip() or MISSING_CITY,
    )
    context = {
        "companyName": company_name,
        "city": project.city,
        "website": website,
        "competitors": competitors[:CONTEXT_COMPETITORS],
    }
    return prompt, context


def build_analysis_request(prompt: str) -> dict[str, Any]:
    return {
        "model": settings.analysis_model,
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}],
            }
        ],
        "text": {
            "format": {
                "type": "json_schema",
                "name": REPUTATION_ANALYSIS_JSON_SCHEMA["name"],
                "schema": REPUTATION_ANALYSIS_JSON_SCHEMA["schema"],
            }
        },
        "tools": [
            {
                "type": "web_search",
                "user_location": {"type": "approximate"},
                "search_context_size": "medium",
            }
        ],
        "temperature": 1,
        "max_output_tokens": settings.analysis_max_output_tokens,
        "top_p": 1,
        "store": True,
        "include": ["web_search_call.action.sources"],
    }


def _domains_of(db: Session, project: Project) -> list[Domain]:
    return list(
        db.execute(
            select(Domain).where(Domain.project_id == project.id).order_by(Domain.id)
        ).scalars()
    )


def serialize_run(run: ProjectAnalysis, report: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": run.id,
        "createdAt": as_utc(run.created_at).isoformat(),
        "summary": summarize_analysis(report, as_utc(run.created_at)),
    }


def run_project_analysis(
    db: Session,
    project: Project,
    client: LlmClient,
    user: User | None = None,
) -> dict[str, Any]:
    """
    Generate, store and return a new report.

    Raises LlmError when the call fails and LlmResponseError when the answer
    is empty or not a usable report.
    """
    prompt, context = build_analysis_context(project, _domains_of(db, project))

    logger.info("Starting analysis for project %s", project.id)
    payload = client.responses(
        build_analysis_request(prompt),
        timeout=settings.analysis_timeout_seconds,
    )

    text = extract_response_text(payload)
    raw_text = text or None
    raw = extract_response_json(payload)
    if raw is None and raw_text:
        try:
            raw = parse_llm_json(raw_text)
        except LlmJsonError as exc:
            logger.warning(
                "Analysis output for project %s is not JSON (%d chars)",
                project.id,
                len(raw_text),
            )
            raise LlmResponseError("Unexpected response format") from exc

    if not raw:
        raise LlmResponseError("Empty response from OpenAI")

    report = sanitize_reputation_report(raw)
    if report is None:
        raise LlmResponseError("Unexpected response format")

    run = ProjectAnalysis(
        project_id=project.id,
        report=report,
        context=context,
        raw_text=raw_text,
        prompt=prompt,
        created_by_id=user.id if user is not None else None,
    )
    db.add(run)
    db.commit()
    db.refresh(run)
    logger.info("Stored analysis %s for project %s", run.id, project.id)

    return {
        "result": report,
        "raw": raw,
        "rawText": raw_text,
        "prompt": prompt,
        "context": context,
        "run": serialize_run(run, report),
        "history": get_analysis_history(db, project),
    }


def _runs(db: Session, project: Project, limit: int) -> list[ProjectAnalysis]:
    return list(
        db.execute(
            select(ProjectAnalysis)
            .where(ProjectAnalysis.project_id == project.id)
            .order_by(ProjectAnalysis.created_at.desc(), ProjectAnalysis.id.desc())
            .limit(limit)
        ).scalars()
    )


def get_analysis_history(
    db: Session,
    project: Project,
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """Newest first. Stored reports that no longer pass sanitizing are skipped."""
    history = []
    for run in _runs(db, project, limit or settings.analysis_history_limit):
        report = sanitize_reputation_report(run.report)
        if report is None:
            logger.debug("Skipping analysis %s: stored report is not valid", run.id)
            continue
        history.append(serialize_run(run, report))
    return history


def get_latest_analysis(db: Session, project: Project) -> dict[str, Any] | None:
    for run in _runs(db, project, settings.analysis_history_limit):
        report = sanitize_reputation_report(run.report)
        if report is not None:
            return {
                "parsed": report,
                "createdAt": as_utc(run.created_at).isoformat(),
                "history": get_analysis_history(db, project),
            }
    return None
