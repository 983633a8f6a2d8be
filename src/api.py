import logging
import os

from fastapi import FastAPI, BackgroundTasks, HTTPException

from src.config import AppConfig
from src.builder import WorkflowBuilder
from src.core.work_item import IntakeRecord, RunStatus, WorkItem

logger = logging.getLogger("ticket_agent.intake")


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Factory function for creating the FastAPI app with config."""
    if config is None:
        config = AppConfig.from_yaml("config.yaml")

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    os.environ.setdefault("OPIK_PROJECT_NAME", config.opik_project)
    if config.opik_workspace:
        os.environ.setdefault("OPIK_WORKSPACE", config.opik_workspace)

    builder = WorkflowBuilder(config)
    orchestrator = builder.build()
    repository = builder.repository

    app = FastAPI(title="Portal Ticket Agent")

    @app.post("/registros", status_code=202)
    def create_registro(record: IntakeRecord, background_tasks: BackgroundTasks):
        """Store the record as PENDING and start the automation in the background."""
        item = repository.add(WorkItem(id=0, **record.normalized()))
        logger.info(
            f"Registro {item.id} stored: tax_id={item.tax_id}, company={item.company}, "
            f"channel={item.contact_channel!r}, agent={item.assigned_agent!r}, sales_line={item.sales_line!r}"
        )
        background_tasks.add_task(orchestrator.run, item)
        return {"status": "accepted", "id": item.id}

    @app.get("/registros/{item_id}")
    def get_registro(item_id: str):
        item = repository.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Registro {item_id} not found")
        return item.model_dump(mode="json")

    @app.post("/registros/{item_id}/run", status_code=202)
    def rerun_registro(item_id: str, background_tasks: BackgroundTasks):
        """Manual re-trigger for a finished run."""
        item = repository.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=f"Registro {item_id} not found")
        if item.status is RunStatus.IN_PROGRESS:
            raise HTTPException(status_code=409, detail=f"Registro {item_id} is already running")
        logger.info(f"Registro {item.id} re-triggered (was {item.status.value})")
        background_tasks.add_task(orchestrator.run, item)
        return {"status": "accepted", "id": item.id}

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


# Module-level app instance for uvicorn (CMD: uvicorn src.api:app)
app = create_app()
