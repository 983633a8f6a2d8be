import logging

import opik

from src.nodes.base import BaseNode
from src.core.errors import ListingVerificationError, NoListingRowsError
from src.core.listing import FIRST_ROW_STRATEGY, ListingMatch, ListingRow, match_row
from src.core.workflow_state import RunWorkflowState
from src.services.portal.base import ListingReader

logger = logging.getLogger("ticket_agent.listing")


class VerifyListingNode(BaseNode):
    """Recovers the ticket the portal assigned to the record just submitted."""

    name = "verify_listing"

    def __init__(self, listing: ListingReader, wait_timeout_ms: int):
        self.listing = listing
        self.wait_timeout_ms = wait_timeout_ms

    @opik.track(name="verify_listing_node")
    def __call__(self, state: RunWorkflowState) -> dict:
        if state.get("final_status") == "error":
            return {"trajectory": self._trajectory(state)}

        item = state["work_item"]
        try:
            match = self.find_ticket(item.tax_id, item.company)
        except Exception as e:
            logger.error(f"Listing verification failed for work item {item.id}: {e}")
            return self._failed(state, e)

        logger.info(f"Work item {item.id} -> ticket {match.ticket} ({match.strategy})")
        return {
            "ticket": match.ticket,
            "match_strategy": match.strategy,
            "degraded_match": match.degraded,
            "trajectory": self._trajectory(state),
        }

    def find_ticket(self, tax_id: str, company: str) -> ListingMatch:
        self.listing.open_listing()
        rows = self._wait_and_read()
        if not rows:
            logger.info("Listing has no readable rows yet, reloading once")
            self.listing.reload()
            rows = self._wait_and_read()
            if not rows:
                raise NoListingRowsError()

        match = match_row(rows, tax_id, company)
        if match is not None:
            return match

        query = (tax_id or "").strip() or (company or "").strip()
        if query and self.listing.has_search():
            logger.info(f"No row matched, filtering listing by {query!r}")
            self.listing.search(query)
            filtered = self._wait_and_read()
            match = match_row(filtered, tax_id, company)
            if match is not None:
                return match.model_copy(update={"strategy": f"filtered_{match.strategy}"})
            if filtered:
                rows = filtered

        # No ordering guarantee from the portal; first row is assumed newest.
        first = rows[0]
        if not first.ticket:
            raise ListingVerificationError("First listing row has no ticket")
        logger.warning(
            f"Degraded match: no row for tax id {tax_id!r} / company {company!r}, "
            f"using first row ticket {first.ticket}"
        )
        return ListingMatch(ticket=first.ticket, strategy=FIRST_ROW_STRATEGY, degraded=True)

    def _wait_and_read(self) -> list[ListingRow]:
        # A placeholder "no records" row is attached but parses to nothing.
        if self.listing.wait_for_rows(self.wait_timeout_ms) == 0:
            return []
        return self.listing.read_rows()
