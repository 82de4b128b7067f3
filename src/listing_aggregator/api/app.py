from fastapi import FastAPI

from listing_aggregator import __version__
from listing_aggregator.api.routes.search import router as search_router


def health():
    return {"status": "ok", "version": __version__}


app = FastAPI(title="listing_aggregator")
app.include_router(search_router, prefix="/api")


@app.get("/api/health")
def health_route():
    return health()
