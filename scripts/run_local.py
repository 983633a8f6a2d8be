"""Local end-to-end run: one sample work item through the full automation.

Usage:
    python scripts/run_local.py
    python scripts/run_local.py --config config.mock.yaml

This script:
1. Builds the orchestrator from the given config (real browsers or mocks)
2. Stores a sample work item in the in-memory repository
3. Runs it synchronously: login → form → listing → ticket → notifications
4. Prints the resulting work item status

Requires .env with: PORTAL_USER, PORTAL_PASSWORD (real backend only)
"""
# ruff: noqa: E402
import argparse
import logging
import sys
from pathlib import Path

project_root = str(Path(__file__).parent.parent)
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from dotenv import load_dotenv
load_dotenv(Path(project_root) / ".env")

from src.config import AppConfig
from src.builder import WorkflowBuilder
from src.core.work_item import WorkItem

SAMPLE_ITEM = {
    "tax_id": "900123456",
    "company": "ACME LOGISTICA SAS",
    "city": "bogota",
    "contact_name": "JUAN CARLOS PEREZ",
    "phone": "3001234567",
    "email": "compras@acme.com.co",
    "client_type": "Nuevo",
    "description": "ALQUILER MONTACARGAS 2.5 TON POR 3 MESES",
    "contact_channel": "WhatsApp",
    "assigned_agent": "CAROLINA MARTINEZ",
    "sales_line": "Alquiler montacargas",
}


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", type=str, default=str(Path(project_root) / "config.yaml"))
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    print("=== Portal Ticket Agent: Local Run ===\n")
    config = AppConfig.from_yaml(args.config)
    print(f"Config: backend={config.browser_backend}, portal={config.portal_base_url}")
    print(f"Notify target: {config.notify_target}\n")

    builder = WorkflowBuilder(config)
    orchestrator = builder.build()
    item = builder.repository.add(WorkItem(id=0, **SAMPLE_ITEM))

    result = orchestrator.run(item)
    stored = builder.repository.get(item.id)

    print("=" * 60)
    print("RUN RESULT")
    print("=" * 60)
    print(f"  Final status:     {result.get('final_status')}")
    print(f"  Trajectory:       {result.get('trajectory')}")
    print(f"  Ticket:           {result.get('ticket')}")
    print(f"  Match strategy:   {result.get('match_strategy')}")
    print(f"  Skipped fields:   {result.get('skipped_fields')}")
    print(f"  Group notified:   {result.get('group_notified')}")
    print(f"  Requester notif.: {result.get('requester_notified')}")
    print(f"  Notify errors:    {result.get('notification_errors')}")
    print(f"  Error:            {result.get('error_message')}")
    print(f"  Artifacts:        {result.get('artifacts')}")
    print("\n  Stored work item:")
    print(f"    status={stored.status.value} ticket={stored.ticket!r} last_error={stored.last_error!r}")
    print("=" * 60)


if __name__ == "__main__":
    main()
