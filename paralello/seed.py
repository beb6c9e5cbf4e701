"""Seed script for default templates."""

import logging
import sys

import yaml
from sqlalchemy.orm import Session

from paralello.database import SessionLocal
from paralello.models.template import Template

logger = logging.getLogger(__name__)


def load_templates(db: Session, data: dict) -> int:
    """Insert shared default templates that do not exist yet. Returns the number added."""
    added = 0
    for item in data.get("templates", []):
        existing = (
            db.query(Template)
            .filter(Template.is_default == True, Template.name == item["name"])  # noqa: E712
            .first()
        )
        if existing:
            logger.info(f"Template {item['name']} already exists, skipping")
            continue
        db.add(
            Template(
                organization_id=None,
                name=item["name"],
                category=item.get("category", "other"),
                content=item["content"],
                is_default=True,
            )
        )
        added += 1
    db.commit()
    return added


def seed_templates(yaml_file: str) -> int:
    """Seed default templates from a YAML file."""
    db: Session = SessionLocal()
    try:
        with open(yaml_file, "r") as f:
            data = yaml.safe_load(f) or {}
        added = load_templates(db, data)
        logger.info(f"Seeded {added} templates")
        return added
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python -m paralello.seed templates.yaml")
        sys.exit(1)
    seed_templates(sys.argv[1])
