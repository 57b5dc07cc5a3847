from fastapi import APIRouter, Depends, Response

from app.schemas.assistant import AssistantRequest, AssistantResponse, ErrorResponse
from app.services.assistant_service import AssistantService, build_assistant_service

router = APIRouter(prefix="/assistant", tags=["assistant"])
legacy_router = APIRouter(prefix="/fashion-assistant", tags=["assistant"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Client-Info, Apikey",
}


def get_assistant_service() -> AssistantService:
    return build_assistant_service()


@router.post("", response_model=AssistantResponse, responses={500: {"model": ErrorResponse}})
@legacy_router.post("", response_model=AssistantResponse, responses={500: {"model": ErrorResponse}})
def ask_assistant(
    payload: AssistantRequest,
    service: AssistantService = Depends(get_assistant_service),
) -> AssistantResponse:
    return service.handle(payload)


@router.options("", include_in_schema=False)
@legacy_router.options("", include_in_schema=False)
def assistant_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)

