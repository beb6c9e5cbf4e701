"""Template library endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import or_
from sqlalchemy.orm import Session

from paralello.core.templating import placeholders
from paralello.database import get_db
from paralello.models.template import Template

router = APIRouter()


class TemplateCreate(BaseModel):
    organization_id: int
    name: str
    category: str = "other"
    content: str


class TemplateUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    content: Optional[str] = None


def _template_dict(t: Template) -> dict:
    return {
        "id": t.id,
        "organization_id": t.organization_id,
        "name": t.name,
        "category": t.category,
        "content": t.content,
        "is_default": t.is_default,
        "placeholders": placeholders(t.content),
    }


def _get_owned_template(db: Session, template_id: int) -> Template:
    template = db.query(Template).filter(Template.id == template_id).first()
    if not template:
        raise HTTPException(status_code=404, detail="Template not found")
    if template.is_default:
        raise HTTPException(status_code=409, detail="Default templates are read-only")
    return template


@router.get("/")
def list_templates(organization_id: int, category: Optional[str] = None, db: Session = Depends(get_db)):
    """Organization templates plus shared defaults."""
    query = db.query(Template).filter(
        or_(Template.organization_id == organization_id, Template.is_default == True)  # noqa: E712
    )
    if category:
        query = query.filter(Template.category == category)
    return [_template_dict(t) for t in query.order_by(Template.is_default.desc(), Template.name).all()]


@router.post("/")
def create_template(data: TemplateCreate, db: Session = Depends(get_db)):
    """Create template."""
    if not data.content.strip():
        raise HTTPException(status_code=422, detail="Template content must not be empty")
    template = Template(**data.dict(), is_default=False)
    db.add(template)
    db.commit()
    db.refresh(template)
    return _template_dict(template)


@router.put("/{template_id}")
def update_template(template_id: int, data: TemplateUpdate, db: Session = Depends(get_db)):
    """Update template."""
    template = _get_owned_template(db, template_id)
    for key, value in data.dict(exclude_unset=True).items():
        setattr(template, key, value)
    db.commit()
    db.refresh(template)
    return _template_dict(template)


@router.delete("/{template_id}")
def delete_template(template_id: int, db: Session = Depends(get_db)):
    """Delete template."""
    template = _get_owned_template(db, template_id)
    db.delete(template)
    db.commit()
    return {"message": "Template deleted"}
