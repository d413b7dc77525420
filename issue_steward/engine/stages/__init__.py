"""Stages of a daily run."""

from issue_steward.engine.stages.base import RunStage
from issue_steward.engine.stages.daily_issue import DailyIssueStage
from issue_steward.engine.stages.drafts import DraftGateStage
from issue_steward.engine.stages.materialize import SubIssueMaterializer
from issue_steward.engine.stages.summary import SummaryStage

__all__ = [
    "DailyIssueStage",
    "DraftGateStage",
    "RunStage",
    "SubIssueMaterializer",
    "SummaryStage",
]
