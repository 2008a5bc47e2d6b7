from fastapi import APIRouter, Request

from lpkit.api.v1.solve import router as solve_router
from lpkit.solvers.lp.build import backend_available

router = APIRouter()


@router.get("/health")
def health(request: Request) -> dict:
    """Reports whether the configured LP and MIP backends can be created."""
    settings = request.app.state.settings
    backends = {
        kind: {"name": name, "available": backend_available(name)}
        for kind, name in (("lp", settings.lp_backend), ("mip", settings.mip_backend))
    }
    ok = all(b["available"] for b in backends.values())
    return {"status": "ok" if ok else "degraded", "backends": backends}


router.include_router(solve_router)
