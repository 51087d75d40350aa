# graph.py
import logging
from typing import Any, Dict, Optional, Sequence

import requests
from langchain_core.runnables import RunnableConfig
from langgraph.graph import StateGraph, END

from .aggregator import group_records, summarize_run
from .fanout import ProgressCallback, fan_out
from .models import ResumeUpload
from .normalizer import normalize_response
from .questions import parse_questions
from .state import AnalysisState

logger = logging.getLogger(__name__)


class AnalysisInputError(ValueError):
    """Raised before any upload when the run cannot start."""


def validate_run_inputs(resumes: Sequence[ResumeUpload], job_description: str, questions: Sequence[str]) -> None:
    if not resumes:
        raise AnalysisInputError("Please select at least one resume file")
    if not job_description or not job_description.strip():
        raise AnalysisInputError("Please provide a job description file")
    if not questions:
        raise AnalysisInputError("Please enter at least one question")


def parse_questions_node(state: AnalysisState) -> Dict[str, Any]:
    questions = parse_questions(state["question_text"])
    logger.info("Parsed %d question(s)", len(questions))
    return {"questions": questions}


def fan_out_node(state: AnalysisState, config: RunnableConfig) -> Dict[str, Any]:
    options = (config or {}).get("configurable", {})
    batches = fan_out(
        state["resumes"],
        state["job_description"],
        state["questions"],
        url=options.get("url"),
        timeout=options.get("timeout"),
        session=options.get("session"),
        on_progress=options.get("on_progress"),
    )
    return {"batches": batches}


def normalize_node(state: AnalysisState) -> Dict[str, Any]:
    records = []
    for batch in state["batches"]:
        for entry in batch["responses"]:
            records.append(normalize_response(
                entry,
                resume_id=batch["resume_id"],
                resume_file=batch["resume_file"],
            ))
    return {"records": records}


def aggregate_node(state: AnalysisState) -> Dict[str, Any]:
    records = state["records"]
    groups = group_records(records)
    summary = summarize_run(records)
    logger.info(
        "Grouped %d record(s) into %d candidate(s): %d succeeded, %d failed",
        summary.total, len(groups), summary.succeeded, summary.failed,
    )
    return {"groups": groups, "summary": summary}


workflow = StateGraph(AnalysisState)
workflow.add_node("parse_questions", parse_questions_node)
workflow.add_node("fan_out", fan_out_node)
workflow.add_node("normalize", normalize_node)
workflow.add_node("aggregate", aggregate_node)

workflow.set_entry_point("parse_questions")

workflow.add_edge("parse_questions", "fan_out")
workflow.add_edge("fan_out", "normalize")
workflow.add_edge("normalize", "aggregate")
workflow.add_edge("aggregate", END)

app = workflow.compile()


def run_analysis(
    resumes: Sequence[ResumeUpload],
    job_description: str,
    question_text: str,
    on_progress: Optional[ProgressCallback] = None,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> Dict[str, Any]:
    """
    Runs one full analysis and returns the final workflow state.

    Raises AnalysisInputError before any network activity when there are no
    resumes, no job description or no questions.
    """
    validate_run_inputs(resumes, job_description, parse_questions(question_text))

    initial_input = {
        "job_description": job_description,
        "question_text": question_text,
        "resumes": list(resumes),
        "questions": [],
        "batches": [],
        "records": [],
        "groups": [],
    }
    config = {
        "configurable": {
            "on_progress": on_progress,
            "url": url,
            "timeout": timeout,
            "session": session,
        }
    }

    final_state = dict(initial_input)
    for update in app.stream(initial_input, config=config):
        node_name = list(update.keys())[0]
        logger.debug("State after node: '%s'", node_name)
        final_state.update(update[node_name] or {})
    return final_state
