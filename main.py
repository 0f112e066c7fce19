# Software Engineer: Kyeshav Chettiar
# Company FXO - Adcorp
# Configured and pushed onto the virtual machine for testing and evaluation for team members to use within the companies rules and regulations
# v3.0.0.0

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.database import engine, Base
from core.exceptions import PlanningError

# Import all models to register them
from models.order_container import OrderContainer
from models.receive_plan import ReceivePlan, PlanContainer

# Import routers
from api import receive_plans

# Create database tables
Base.metadata.create_all(bind=engine)

# Initialize FastAPI app
app = FastAPI(
    title="CFS Receive Planning",
    description="Container Freight Station receive plan lifecycle and container assignment",
    version="1.0.0"
)

log = logging.getLogger(__name__)

# Register routers
app.include_router(receive_plans.router, prefix="/api")
app.include_router(receive_plans.unplanned_router, prefix="/api")


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    """Business-rule violations go back to the caller with their error code."""
    log.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


# ==================== HEALTH CHECK ====================
@app.get("/health")
def health_check():
    """Health check endpoint for Docker and Kubernetes."""
    return {
        "status": "healthy",
        "service": "CFS Receive Planning",
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
