"""Prompt enhancement API routes.

Proxies raw prompts to an upstream model, composes enhancement instructions
without calling a model, and exposes the built-in instruction tables and the
models each provider offers.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from promptforge.api.deps import build_gateway, get_api_key, get_factory
from promptforge.api.schemas import (
    EnhanceRequest,
    EnhanceResponse,
    InstructionRequest,
    InstructionResponse,
    InstructionTablesResponse,
    ModelEntry,
    ModelListResponse,
)
from promptforge.core.factory import ComponentFactory
from promptforge.interfaces.gateway import GatewayError
from promptforge.strategies.template_engine import (
    DEFAULT_INSTRUCTION_TABLES,
    GatewayProvider,
    IncompleteInstructionTableError,
    InstructionLookupError,
    build_enhancement_request,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/enhance", tags=["enhance"])


@router.post("", response_model=EnhanceResponse, status_code=status.HTTP_200_OK)
async def enhance_prompt(
    request: EnhanceRequest,
    api_key: str | None = Depends(get_api_key),
    factory: ComponentFactory = Depends(get_factory),
) -> EnhanceResponse:
    """Forward a prompt to an upstream model and return its text.

    Args:
        request: The prompt, provider and optional model.
        api_key: Provider key from the X-API-Key header.
        factory: Gateway factory.

    Returns:
        EnhanceResponse with the generated text.

    Raises:
        HTTPException: 401 if no key is available, 502 on upstream failure.
    """
    try:
        gateway = build_gateway(factory, request.provider, api_key)
        logger.info(f"Proxying enhancement to {gateway.provider} (model={request.model or 'default'})")

        try:
            enhanced = await gateway.complete(request.prompt, model=request.model)
        except GatewayError as e:
            logger.warning(f"Upstream enhancement failed: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e),
            ) from e

        return EnhanceResponse(enhanced_prompt=enhanced)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Enhancement failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Enhancement failed: {str(e)}",
        ) from e


@router.post("/instruction", response_model=InstructionResponse, status_code=status.HTTP_200_OK)
async def compose_instruction(request: InstructionRequest) -> InstructionResponse:
    """Compose the enhancement instruction for a set of attributes.

    Args:
        request: Attributes, custom instruction, table overrides and an
            optional prompt to wrap.

    Returns:
        The instruction, and the full outbound prompt when a prompt was given.

    Raises:
        HTTPException: 422 if overrides are incomplete or a value has no
            instruction.
    """
    try:
        tables = DEFAULT_INSTRUCTION_TABLES.with_overrides(request.instruction_overrides)
        enhancement = build_enhancement_request(
            request.prompt or "",
            request.attributes,
            request.custom_instruction,
            tables,
        )

        return InstructionResponse(
            instruction=enhancement.instruction,
            enhancement_prompt=enhancement.to_prompt() if request.prompt else None,
        )

    except (IncompleteInstructionTableError, InstructionLookupError) as e:
        logger.warning(f"Cannot compose instruction: {e}")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    except Exception as e:
        logger.error(f"Instruction composition failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Instruction composition failed: {str(e)}",
        ) from e


@router.get(
    "/instructions/defaults",
    response_model=InstructionTablesResponse,
    status_code=status.HTTP_200_OK,
)
async def get_default_instructions() -> InstructionTablesResponse:
    """Return the built-in instruction tables."""
    return InstructionTablesResponse(**DEFAULT_INSTRUCTION_TABLES.to_dict())


@router.get("/models", response_model=ModelListResponse, status_code=status.HTTP_200_OK)
async def list_models(
    provider: GatewayProvider = Query(..., description="Provider to list models for"),
    api_key: str | None = Depends(get_api_key),
    factory: ComponentFactory = Depends(get_factory),
) -> ModelListResponse:
    """List the models a provider offers to the given key.

    Raises:
        HTTPException: 401 if no key is available, 502 on upstream failure.
    """
    try:
        gateway = build_gateway(factory, provider, api_key)

        try:
            models = await gateway.list_models()
        except GatewayError as e:
            logger.warning(f"Model listing failed for {provider.value}: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e),
            ) from e

        logger.info(f"Listed {len(models)} models for {provider.value}")
        return ModelListResponse(
            provider=provider,
            models=[ModelEntry(id=m.id, display_name=m.display_name) for m in models],
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Model listing failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Model listing failed: {str(e)}",
        ) from e
