from fastapi import APIRouter, Query, Request

router = APIRouter(tags=["diagnostics"])


@router.get("/test-ollama")
async def test_ollama(request: Request, full: bool = Query(False)):
    """Inference service checks; generation checks only run with ?full=true."""
    return await request.app.state.llm.diagnose(include_generation=full)


@router.get("/test-google-places")
def test_google_places(request: Request, destination: str = Query("Barcelona, Spain", max_length=120)):
    return request.app.state.places_service.diagnose(destination)
