# backend/eventbook/services/template_service.py
"""
Template rendering service for the EventBook platform.

Renders the Jinja2 e-mail templates under eventbook/templates with a
shared set of context variables.
"""

from datetime import datetime
from decimal import Decimal
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, TemplateNotFound
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BRAND_NAME
from .base import BaseService

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent.parent / "templates"


def currency(value: Union[int, float, Decimal, None]) -> str:
    """Format a number as currency."""
    return f"{Decimal(str(value or 0)):,.2f}"


def format_date(value: Union[datetime, str], format_str: str = "%B %d, %Y") -> str:
    if isinstance(value, str):
        return value
    return value.strftime(format_str)


class TemplateService(BaseService):
    """Centralized template rendering using Jinja2."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.env = Environment(
            loader=FileSystemLoader(TEMPLATE_DIR),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["currency"] = currency
        self.env.filters["format_date"] = format_date

    def get_common_context(self) -> Dict[str, Any]:
        return {
            "brand_name": BRAND_NAME,
            "current_year": datetime.now().year,
            "frontend_url": settings.frontend_url,
        }

    @BaseService.measure_operation("render_template")
    def render_template(
        self, template_name: str, context: Optional[Dict[str, Any]] = None, **kwargs: Any
    ) -> str:
        """
        Render a template with the given context.

        Args:
            template_name: Path to template relative to the templates directory
            context: Dictionary of template variables
            **kwargs: Additional template variables

        Raises:
            TemplateNotFound: If template doesn't exist
        """
        try:
            template = self.env.get_template(template_name)
        except TemplateNotFound:
            self.logger.error(f"Template not found: {template_name}")
            raise

        full_context = self.get_common_context()
        if context:
            full_context.update(context)
        full_context.update(kwargs)
        return template.render(full_context)
