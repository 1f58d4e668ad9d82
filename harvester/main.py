import os
from fastapi import FastAPI
from harvester.db import init_db
from harvester.api.routes import router as api_router

# create FastAPI instance
app = FastAPI(title="catalog-harvester")
app.include_router(api_router)


@app.on_event("startup")
def on_startup():
    # store initialization failures are fatal
    init_db()
    if os.getenv("SCHEDULER_ENABLED", "0") == "1":
        from harvester.scheduler import start_scheduler
        start_scheduler()
