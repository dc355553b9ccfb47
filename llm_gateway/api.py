"""
HTTP routes for provider management.

Endpoints:
    POST /provider/test    - Check credentials against the provider
    POST /provider/models  - List the default model catalog of a provider
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, FastAPI, Request
from pydantic import BaseModel

from llm_gateway.exceptions import GatewayError
from llm_gateway.logging_utils import GatewayErrorHandler
from llm_gateway.providers import ModelInfo, ProviderConfig

logger = structlog.get_logger(__name__)


class TestConnectionRequest(BaseModel):
    provider_config: ProviderConfig


class TestConnectionResponse(BaseModel):
    success: bool
    error: str | None = None


class ListModelsRequest(BaseModel):
    provider_config: ProviderConfig


class ListModelsResponse(BaseModel):
    models: list[ModelInfo]
    error: str | None = None


router = APIRouter(prefix="/provider")


@router.post("/test", response_model=TestConnectionResponse)
async def test_connection(
    body: TestConnectionRequest, request: Request
) -> TestConnectionResponse:
    client_kwargs: dict[str, Any] = getattr(request.app.state, "client_kwargs", {})
    try:
        success = await body.provider_config.test_connection(**client_kwargs)
    except GatewayError as e:
        status, category = GatewayErrorHandler.classify_error(e)
        logger.info(
            "Connection test failed",
            provider=body.provider_config.provider_type.value,
            status=status,
            error_category=category,
        )
        return TestConnectionResponse(success=False, error=str(e))
    except Exception as e:
        # Failures are reported in the body, never as an HTTP error
        error = GatewayErrorHandler.to_gateway_error(
            e, "test_connection", body.provider_config.provider_type.value
        )
        return TestConnectionResponse(success=False, error=str(error))
    return TestConnectionResponse(success=success)


@router.post("/models", response_model=ListModelsResponse)
async def list_models(body: ListModelsRequest) -> ListModelsResponse:
    return ListModelsResponse(models=body.provider_config.get_default_models())


def create_app(client_kwargs: dict[str, Any] | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        client_kwargs: Extra keyword arguments for provider clients
            built by the routes (timeouts, transports).

    Returns:
        Configured FastAPI app.
    """
    app = FastAPI(title="LLM Gateway", version="0.1.0")
    app.state.client_kwargs = client_kwargs or {}
    app.include_router(router)
    return app
