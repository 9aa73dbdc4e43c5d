"""Admin message template routes, including a render preview."""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.deps import get_admin_db
from app.middleware.exceptions import ResourceNotFoundError
from app.models.template import Template
from app.schemas.template import (
    TemplateCreate,
    TemplateOut,
    TemplatePreviewOut,
    TemplatePreviewRequest,
    TemplateUpdate,
)
from app.utils.templating import fill_template, placeholders

router = APIRouter()


async def _get_template(db: AsyncSession, template_id: str) -> Template:
    template = await db.get(Template, template_id)
    if not template:
        raise ResourceNotFoundError("Template", template_id)
    return template


@router.get("/", response_model=list[TemplateOut])
async def list_templates(
    type_filter: str | None = Query(None, alias="type"),
    active_only: bool = Query(False),
    db: AsyncSession = Depends(get_admin_db),
):
    query = select(Template)
    if type_filter:
        query = query.where(Template.type == type_filter)
    if active_only:
        query = query.where(Template.is_active.is_(True))
    result = await db.execute(query.order_by(Template.type, Template.title))
    return [TemplateOut.model_validate(t) for t in result.scalars().all()]


@router.post("/", response_model=TemplateOut, status_code=status.HTTP_201_CREATED)
async def create_template(body: TemplateCreate, db: AsyncSession = Depends(get_admin_db)):
    template = Template(**body.model_dump())
    db.add(template)
    await db.flush()
    return TemplateOut.model_validate(template)


@router.get("/{template_id}", response_model=TemplateOut)
async def get_template(template_id: str, db: AsyncSession = Depends(get_admin_db)):
    return TemplateOut.model_validate(await _get_template(db, template_id))


@router.patch("/{template_id}", response_model=TemplateOut)
async def update_template(
    template_id: str,
    body: TemplateUpdate,
    db: AsyncSession = Depends(get_admin_db),
):
    template = await _get_template(db, template_id)
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is not None or key == "category":
            setattr(template, key, value)
    await db.flush()
    return TemplateOut.model_validate(template)


@router.post("/{template_id}/toggle", response_model=TemplateOut)
async def toggle_template(template_id: str, db: AsyncSession = Depends(get_admin_db)):
    template = await _get_template(db, template_id)
    template.is_active = not template.is_active
    await db.flush()
    return TemplateOut.model_validate(template)


@router.get("/{template_id}/preview", response_model=TemplatePreviewOut)
async def preview_template_query(
    template_id: str,
    request: Request,
    db: AsyncSession = Depends(get_admin_db),
):
    """Render with the query string as the placeholder mapping."""
    template = await _get_template(db, template_id)
    return TemplatePreviewOut(
        rendered=fill_template(template.content, dict(request.query_params)),
        placeholders=placeholders(template.content),
    )


@router.post("/{template_id}/preview", response_model=TemplatePreviewOut)
async def preview_template(
    template_id: str,
    body: TemplatePreviewRequest,
    db: AsyncSession = Depends(get_admin_db),
):
    template = await _get_template(db, template_id)
    return TemplatePreviewOut(
        rendered=fill_template(template.content, body.values),
        placeholders=placeholders(template.content),
    )


@router.delete("/{template_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_template(template_id: str, db: AsyncSession = Depends(get_admin_db)):
    template = await _get_template(db, template_id)
    await db.delete(template)
    await db.flush()
