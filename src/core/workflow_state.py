from typing import TypedDict

from src.core.work_item import WorkItem


class RunWorkflowState(TypedDict, total=False):
    # --- Input ---
    work_item: WorkItem
    attempt: int
    max_attempts: int

    # --- Form fill ---
    form_submitted: bool
    skipped_fields: list[str]           # optional dropdowns left unset

    # --- Listing verification ---
    ticket: str
    match_strategy: str
    degraded_match: bool

    # --- Tracking & notification ---
    ticket_persisted: bool
    group_notified: bool
    requester_notified: bool
    notification_errors: list[str]
    trajectory: list[str]                # node names visited

    # --- Final ---
    error_message: str
    error_kind: str                      # see src.core.errors.error_kind
    artifacts: list[str]
    final_status: str                    # "completed" | "error" | "retry"
