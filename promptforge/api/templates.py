"""Template management API routes.

Handles template CRUD, list reordering, rendering with field values, and
enhancement of a rendered template through a model gateway.
"""

import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from promptforge.api.deps import build_gateway, get_api_key, get_db, get_factory
from promptforge.api.schemas import (
    RenderRequest,
    RenderResponse,
    ReorderItem,
    TemplateEnhanceRequest,
    TemplateEnhanceResponse,
)
from promptforge.core.factory import ComponentFactory
from promptforge.db.models import (
    Template,
    TemplateCreate,
    TemplateListResponse,
    TemplateRead,
    TemplateUpdate,
)
from promptforge.interfaces.gateway import GatewayError
from promptforge.strategies.template_engine import (
    DEFAULT_INSTRUCTION_TABLES,
    Domain,
    IncompleteInstructionTableError,
    TemplateAttributes,
    build_enhancement_request,
    extract_placeholders,
    find_unresolved,
    preserve_placeholders,
    render_template,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/templates", tags=["templates"])


# =============================================================================
# Helper Functions
# =============================================================================


async def _get_template_or_404(session: AsyncSession, template_id: int) -> Template:
    template = await session.get(Template, template_id)
    if template is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Template {template_id} not found",
        )
    return template


async def _list_ordered(session: AsyncSession) -> TemplateListResponse:
    result = await session.execute(select(Template).order_by(Template.order, Template.id))
    templates = result.scalars().all()
    return TemplateListResponse(
        templates=[TemplateRead.model_validate(t) for t in templates],
        total=len(templates),
    )


# =============================================================================
# CRUD Endpoints
# =============================================================================


@router.get("", response_model=TemplateListResponse, status_code=status.HTTP_200_OK)
async def list_templates(
    domain: Domain | None = Query(default=None, description="Only templates in this domain"),
    is_core: bool | None = Query(default=None, description="Filter by core flag"),
    session: AsyncSession = Depends(get_db),
) -> TemplateListResponse:
    """List templates in their user-defined order.

    Args:
        domain: Optional domain filter.
        is_core: Optional core-template filter.
        session: Database session.

    Returns:
        TemplateListResponse ordered by ``order`` ascending.

    Raises:
        HTTPException: If the query fails.
    """
    try:
        statement = select(Template).order_by(Template.order, Template.id)
        if domain is not None:
            statement = statement.where(Template.domain == domain)
        if is_core is not None:
            statement = statement.where(Template.is_core == is_core)

        result = await session.execute(statement)
        templates = result.scalars().all()

        logger.info(f"Retrieved {len(templates)} templates (domain={domain}, is_core={is_core})")

        return TemplateListResponse(
            templates=[TemplateRead.model_validate(t) for t in templates],
            total=len(templates),
        )

    except Exception as e:
        logger.error(f"Template list failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template list failed: {str(e)}",
        ) from e


@router.post("", response_model=TemplateRead, status_code=status.HTTP_201_CREATED)
async def create_template(
    payload: TemplateCreate,
    session: AsyncSession = Depends(get_db),
) -> TemplateRead:
    """Create a template at the end of the list.

    Args:
        payload: Template fields.
        session: Database session.

    Returns:
        The created template.

    Raises:
        HTTPException: If creation fails.
    """
    try:
        result = await session.execute(select(func.max(Template.order)))
        max_order = result.scalar_one_or_none()
        next_order = 0 if max_order is None else max_order + 1

        template = Template.model_validate({**payload.model_dump(), "order": next_order})
        session.add(template)
        await session.commit()
        await session.refresh(template)

        logger.info(f"Created template {template.id} ('{template.name}') at order {next_order}")
        return TemplateRead.model_validate(template)

    except Exception as e:
        logger.error(f"Failed to create template: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to create template: {str(e)}",
        ) from e


@router.post("/reorder", response_model=TemplateListResponse, status_code=status.HTTP_200_OK)
async def reorder_templates(
    items: list[ReorderItem],
    session: AsyncSession = Depends(get_db),
) -> TemplateListResponse:
    """Assign new list positions in a single transaction.

    Either every position is applied or none is.

    Args:
        items: Template ids with their new ``order`` values.
        session: Database session.

    Returns:
        The full template list in its new order.

    Raises:
        HTTPException: 404 if any id is unknown; 500 if the update fails.
    """
    try:
        for item in items:
            template = await session.get(Template, item.id)
            if template is None:
                await session.rollback()
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail=f"Template {item.id} not found",
                )
            template.order = item.order
            session.add(template)

        await session.commit()
        logger.info(f"Reordered {len(items)} templates")

        return await _list_ordered(session)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to reorder templates: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reorder templates: {str(e)}",
        ) from e


@router.get("/{template_id}", response_model=TemplateRead, status_code=status.HTTP_200_OK)
async def get_template(
    template_id: int,
    session: AsyncSession = Depends(get_db),
) -> TemplateRead:
    """Retrieve a template by id.

    Raises:
        HTTPException: 404 if the template does not exist.
    """
    try:
        template = await _get_template_or_404(session, template_id)
        return TemplateRead.model_validate(template)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Template retrieval failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template retrieval failed: {str(e)}",
        ) from e


@router.put("/{template_id}", response_model=TemplateRead, status_code=status.HTTP_200_OK)
async def update_template(
    template_id: int,
    payload: TemplateUpdate,
    session: AsyncSession = Depends(get_db),
) -> TemplateRead:
    """Update the provided fields of a template.

    Args:
        template_id: The template to update.
        payload: Fields to change; omitted fields are left as they are.
        session: Database session.

    Returns:
        The updated template.

    Raises:
        HTTPException: 404 if the template does not exist.
    """
    try:
        template = await _get_template_or_404(session, template_id)

        changes = payload.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(template, field, value)
        template.updated_at = datetime.datetime.now(datetime.timezone.utc)

        session.add(template)
        await session.commit()
        await session.refresh(template)

        logger.info(f"Updated template {template_id}: {sorted(changes)}")
        return TemplateRead.model_validate(template)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to update template: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to update template: {str(e)}",
        ) from e


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(
    template_id: int,
    session: AsyncSession = Depends(get_db),
) -> Response:
    """Delete a template.

    Raises:
        HTTPException: 404 if the template does not exist.
    """
    try:
        template = await _get_template_or_404(session, template_id)
        await session.delete(template)
        await session.commit()

        logger.info(f"Deleted template {template_id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Failed to delete template: {e}", exc_info=True)
        await session.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete template: {str(e)}",
        ) from e


# =============================================================================
# Render & Enhance Endpoints
# =============================================================================


@router.post("/{template_id}/render", response_model=RenderResponse, status_code=status.HTTP_200_OK)
async def render_stored_template(
    template_id: int,
    request: RenderRequest,
    session: AsyncSession = Depends(get_db),
) -> RenderResponse:
    """Substitute field values into a stored template.

    Args:
        template_id: The template to render.
        request: Placeholder values.
        session: Database session.

    Returns:
        The placeholders, the rendered prompt and any tokens left unresolved.
    """
    try:
        template = await _get_template_or_404(session, template_id)

        prompt = render_template(template.content, request.fields)
        return RenderResponse(
            placeholders=extract_placeholders(template.content),
            prompt=prompt,
            unresolved=find_unresolved(prompt),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Template render failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template render failed: {str(e)}",
        ) from e


@router.post(
    "/{template_id}/enhance",
    response_model=TemplateEnhanceResponse,
    status_code=status.HTTP_200_OK,
)
async def enhance_stored_template(
    template_id: int,
    request: TemplateEnhanceRequest,
    session: AsyncSession = Depends(get_db),
    api_key: str | None = Depends(get_api_key),
    factory: ComponentFactory = Depends(get_factory),
) -> TemplateEnhanceResponse:
    """Render a template, compose its instruction and enhance it upstream.

    The model output has its placeholders restored against the stored
    template content before it is returned.

    Args:
        template_id: The template to enhance.
        request: Field values, provider choice and instruction customizations.
        session: Database session.
        api_key: Provider key from the X-API-Key header.
        factory: Gateway factory.

    Returns:
        The rendered prompt, the instruction used and the enhanced text.

    Raises:
        HTTPException: 404 unknown template, 401 missing key, 422 incomplete
            instruction overrides, 502 upstream failure.
    """
    try:
        template = await _get_template_or_404(session, template_id)

        try:
            tables = DEFAULT_INSTRUCTION_TABLES.with_overrides(request.instruction_overrides)
        except IncompleteInstructionTableError as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(e),
            ) from e

        prompt = render_template(template.content, request.fields)
        enhancement = build_enhancement_request(
            prompt,
            TemplateAttributes.model_validate(template),
            request.custom_instruction,
            tables,
        )

        gateway = build_gateway(factory, request.provider, api_key)
        logger.info(f"Enhancing template {template_id} via {gateway.provider}")

        try:
            enhanced = await gateway.complete(enhancement.to_prompt(), model=request.model)
        except GatewayError as e:
            logger.warning(f"Enhancement of template {template_id} failed upstream: {e}")
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e),
            ) from e

        return TemplateEnhanceResponse(
            template_id=template_id,
            prompt=prompt,
            instruction=enhancement.instruction,
            enhanced_prompt=preserve_placeholders(enhanced, template.content),
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Template enhancement failed: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Template enhancement failed: {str(e)}",
        ) from e
