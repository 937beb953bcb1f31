# aviasafe/main.py
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

# ---------------------------
# Env loading (root .env first, then aviasafe/.env as fallback)
# ---------------------------
load_dotenv(find_dotenv(usecwd=True))
load_dotenv(Path(__file__).resolve().parent / ".env", override=False)

from fastapi import FastAPI
from fastapi.openapi.utils import get_openapi
from fastapi.staticfiles import StaticFiles

from aviasafe.api import health
from aviasafe.api.v1 import (
    admin_storage,
    assessments,
    attachments,
    auth,
    dashboard,
    investigations,
    investigators,
    occurrences,
)
from aviasafe.core.errors import register_exception_handlers
from aviasafe.db.session import engine
from aviasafe.middleware.request_logging import RequestLoggingMiddleware
from aviasafe.models import Base
from aviasafe.services.storage import get_storage
from aviasafe.worker.scheduler import make_scheduler

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger("aviasafe")

# ---------------------------
# CREATE TABLES (dev-only; guard with env)
# ---------------------------
if os.getenv("ENABLE_CREATE_ALL", "1") == "1":
    Base.metadata.create_all(bind=engine)

# ---------------------------
# APP
# ---------------------------
app = FastAPI(title="AviaSafe")

register_exception_handlers(app)
app.add_middleware(RequestLoggingMiddleware)

# ---------------------------
# ROUTER MOUNT
# ---------------------------
app.include_router(health.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
app.include_router(occurrences.router, prefix="/api")
app.include_router(assessments.router, prefix="/api")
app.include_router(investigations.router, prefix="/api")
app.include_router(investigators.router, prefix="/api")
app.include_router(attachments.router, prefix="/api")
app.include_router(admin_storage.router, prefix="/api")
app.include_router(dashboard.router, prefix="/api")

# public URLs of stored attachments
_public_base = os.getenv("ATTACHMENTS_PUBLIC_BASE_URL", "/files").rstrip("/")
if _public_base.startswith("/"):
    app.mount(
        _public_base,
        StaticFiles(directory=str(get_storage().root), check_dir=False),
        name="files",
    )


# ---------------------------
# Scheduler (daily jobs)
# ---------------------------
@app.on_event("startup")
def _start_scheduler():
    if os.getenv("ENABLE_SCHEDULER", "1") != "1":
        app.state.scheduler = None
        return
    app.state.scheduler = make_scheduler()
    app.state.scheduler.start()
    log.info("scheduler started")


@app.on_event("shutdown")
def _stop_scheduler():
    sched = getattr(app.state, "scheduler", None)
    if sched:
        sched.shutdown(wait=False)


# ---------------------------
# OpenAPI (dedupe operationId)
# ---------------------------
def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title="AviaSafe",
        version="1.0.0",
        description="Aviation safety occurrence reporting and investigation API",
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {}).setdefault("securitySchemes", {})
    openapi_schema["components"]["securitySchemes"]["OAuth2PasswordBearer"] = {
        "type": "oauth2",
        "flows": {"password": {"tokenUrl": "/api/auth/login", "scopes": {}}},
    }

    seen = {}
    for path, methods in openapi_schema.get("paths", {}).items():
        for method, operation in methods.items():
            op_id = operation.get("operationId")
            if not op_id:
                continue
            if op_id in seen:
                suffix = "".join(ch for ch in path.replace("/", "_") if ch.isalnum() or ch in "_-")
                new_id = f"{op_id}_{method.lower()}{suffix}"
                n = 2
                while new_id in seen:
                    new_id = f"{op_id}_{method.lower()}{suffix}_{n}"
                    n += 1
                operation["operationId"] = new_id
                seen[new_id] = (path, method)
            else:
                seen[op_id] = (path, method)

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi
