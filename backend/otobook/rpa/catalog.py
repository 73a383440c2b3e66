"""Static catalog of action types, target platforms and workflow templates."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

from ..errors import NotFoundError
from .domain import Step


@dataclass(frozen=True)
class ActionType:
    """A category of step with a fixed vocabulary of actions."""

    id: str
    name: str
    description: str
    actions: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "actions": list(self.actions),
        }


@dataclass(frozen=True)
class Platform:
    """An external platform workflows can push data to or pull data from."""

    id: str
    name: str
    description: str
    endpoints: Mapping[str, Any]
    auth_methods: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "endpoints": dict(self.endpoints),
            "authMethods": list(self.auth_methods),
        }


@dataclass(frozen=True)
class WorkflowTemplate:
    """A read-only workflow blueprint used to seed new workflows."""

    id: str
    name: str
    description: str
    category: str
    steps: tuple[Step, ...]
    executable: bool = True

    def copy_steps(self) -> list[Step]:
        return [step.copy() for step in self.steps]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "steps": [step.to_dict() for step in self.steps],
            "executable": self.executable,
        }


ACTION_TYPES: tuple[ActionType, ...] = (
    ActionType(
        id="browser",
        name="Browser Automation",
        description="Automate web browser interactions",
        actions=("navigate", "click", "type", "scroll", "screenshot", "extract_data"),
    ),
    ActionType(
        id="file",
        name="File Operations",
        description="Manage files and directories",
        actions=("read", "write", "copy", "move", "delete", "zip", "unzip"),
    ),
    ActionType(
        id="data",
        name="Data Processing",
        description="Transform and process data",
        actions=("parse_csv", "parse_json", "transform", "validate", "merge", "filter"),
    ),
    ActionType(
        id="api",
        name="API Integration",
        description="Connect with external APIs",
        actions=("get", "post", "put", "delete", "graphql", "webhook"),
    ),
    ActionType(
        id="email",
        name="Email Automation",
        description="Send and process emails",
        actions=("send", "read", "forward", "reply", "attach", "parse"),
    ),
    ActionType(
        id="database",
        name="Database Operations",
        description="Interact with databases",
        actions=("query", "insert", "update", "delete", "backup", "migrate"),
    ),
    ActionType(
        id="ocr",
        name="OCR Integration",
        description="Extract text from images/documents",
        actions=("extract_text", "extract_table", "extract_form"),
    ),
)


PLATFORMS: tuple[Platform, ...] = (
    Platform(
        id="wordpress",
        name="WordPress",
        description="WordPress CMS Integration",
        endpoints={
            "posts": "/wp-json/wp/v2/posts",
            "pages": "/wp-json/wp/v2/pages",
            "media": "/wp-json/wp/v2/media",
            "users": "/wp-json/wp/v2/users",
        },
        auth_methods=("application_password", "jwt", "oauth"),
    ),
    Platform(
        id="shopify",
        name="Shopify",
        description="Shopify E-commerce Integration",
        endpoints={
            "products": "/admin/api/2024-01/products.json",
            "orders": "/admin/api/2024-01/orders.json",
            "customers": "/admin/api/2024-01/customers.json",
            "inventory": "/admin/api/2024-01/inventory_items.json",
        },
        auth_methods=("api_key", "oauth"),
    ),
    Platform(
        id="woocommerce",
        name="WooCommerce",
        description="WooCommerce E-commerce Integration",
        endpoints={
            "products": "/wp-json/wc/v3/products",
            "orders": "/wp-json/wc/v3/orders",
            "customers": "/wp-json/wc/v3/customers",
            "reports": "/wp-json/wc/v3/reports",
        },
        auth_methods=("consumer_key", "oauth"),
    ),
    Platform(
        id="notion",
        name="Notion",
        description="Notion Workspace Integration",
        endpoints={
            "databases": "/v1/databases",
            "pages": "/v1/pages",
            "blocks": "/v1/blocks",
            "search": "/v1/search",
        },
        auth_methods=("bearer_token", "oauth"),
    ),
    Platform(
        id="airtable",
        name="Airtable",
        description="Airtable Database Integration",
        endpoints={
            "records": "/v0/{baseId}/{tableName}",
            "bases": "/v0/meta/bases",
        },
        auth_methods=("api_key", "oauth"),
    ),
    Platform(
        id="google_sheets",
        name="Google Sheets",
        description="Google Sheets Integration",
        endpoints={
            "spreadsheets": "/v4/spreadsheets",
            "values": "/v4/spreadsheets/{spreadsheetId}/values",
        },
        auth_methods=("service_account", "oauth"),
    ),
    Platform(
        id="custom_api",
        name="Custom API",
        description="Connect to any REST API",
        endpoints={"configurable": True},
        auth_methods=("api_key", "bearer_token", "basic", "oauth"),
    ),
)


TEMPLATES: tuple[WorkflowTemplate, ...] = (
    WorkflowTemplate(
        id="invoice_processing",
        name="Invoice Processing",
        description="Extract invoice data using OCR and send to WordPress/Shopify/Notion",
        category="document_processing",
        steps=(
            Step("ocr", "extract_form", {"provider": "tesseract"}),
            Step("data", "validate", {"schema": "invoice"}),
            Step("api", "post", {"platforms": ["wordpress", "notion"]}),
        ),
    ),
    WorkflowTemplate(
        id="product_sync",
        name="Product Sync",
        description=(
            "Sync products from one platform to multiple platforms "
            "(Shopify → WordPress/WooCommerce)"
        ),
        category="ecommerce",
        steps=(
            Step("api", "get", {"source": "shopify", "resource": "products"}),
            Step("data", "transform", {"mapping": "product_schema"}),
            Step("api", "post", {"targets": ["wordpress", "woocommerce", "notion"]}),
        ),
    ),
    WorkflowTemplate(
        id="document_archiving",
        name="Document Archiving",
        description="OCR documents, categorize, and archive to Airtable/Google Sheets",
        category="document_management",
        steps=(
            Step("file", "read", {"source": "uploads"}),
            Step("ocr", "extract_text", {"provider": "tesseract"}),
            Step("data", "classify", {"model": "document_type"}),
            Step("api", "post", {"targets": ["airtable", "google_sheets"]}),
        ),
    ),
    WorkflowTemplate(
        id="data_backup",
        name="Data Backup",
        description=(
            "Backup data from one platform to another "
            "(WordPress → Airtable/Google Sheets)"
        ),
        category="data_management",
        steps=(
            Step("api", "get", {"source": "wordpress", "resource": "posts"}),
            Step("data", "transform", {"format": "json"}),
            Step("api", "post", {"targets": ["airtable", "google_sheets"]}),
        ),
    ),
    WorkflowTemplate(
        id="web_scraping",
        name="Web Scraping",
        description="Scrape website data and store in WordPress/Notion/Airtable",
        category="data_extraction",
        steps=(
            Step("browser", "navigate", {"url": "https://target-site.com"}),
            Step("browser", "extract_data", {"selector": ".product-item"}),
            Step("api", "post", {"targets": ["wordpress", "notion", "airtable"]}),
        ),
    ),
)


SCHEDULE_CONFIG: dict[str, Any] = {
    "types": ["cron", "interval", "trigger"],
    "examples": {
        "cron": {
            "description": "Run at specific times using cron syntax",
            "examples": [
                {"pattern": "0 9 * * *", "description": "Every day at 9 AM"},
                {"pattern": "0 */2 * * *", "description": "Every 2 hours"},
                {"pattern": "0 0 * * 0", "description": "Every Sunday at midnight"},
            ],
        },
        "interval": {
            "description": "Run at fixed intervals",
            "examples": [
                {"value": 300, "unit": "seconds", "description": "Every 5 minutes"},
                {"value": 1, "unit": "hours", "description": "Every hour"},
                {"value": 1, "unit": "days", "description": "Every day"},
            ],
        },
        "trigger": {
            "description": "Run when triggered by events",
            "examples": [
                {"event": "webhook", "description": "When webhook is called"},
                {"event": "file_upload", "description": "When file is uploaded"},
                {"event": "api_call", "description": "When API endpoint is called"},
            ],
        },
    },
}


def _copy_platform(platform: Platform) -> Platform:
    return replace(platform, endpoints=copy.deepcopy(dict(platform.endpoints)))


def _copy_template(template: WorkflowTemplate) -> WorkflowTemplate:
    return replace(template, steps=tuple(template.copy_steps()))


class CatalogStore:
    """Read-only access to the seeded catalog entries."""

    def __init__(
        self,
        action_types: tuple[ActionType, ...] = ACTION_TYPES,
        platforms: tuple[Platform, ...] = PLATFORMS,
        templates: tuple[WorkflowTemplate, ...] = TEMPLATES,
    ) -> None:
        self._action_types = {item.id: item for item in action_types}
        self._platforms = {item.id: item for item in platforms}
        self._templates = {item.id: item for item in templates}

    def list_action_types(self) -> list[ActionType]:
        return list(self._action_types.values())

    def list_platforms(self) -> list[Platform]:
        return [_copy_platform(item) for item in self._platforms.values()]

    def get_platform(self, platform_id: str) -> Platform:
        platform = self._platforms.get(platform_id)
        if platform is None:
            raise NotFoundError(f"Platform {platform_id} not found")
        return _copy_platform(platform)

    def list_templates(self) -> list[WorkflowTemplate]:
        return [_copy_template(item) for item in self._templates.values()]

    def get_template(self, template_id: str) -> WorkflowTemplate:
        template = self._templates.get(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")
        return _copy_template(template)

    def get_schedule_config(self) -> dict[str, Any]:
        return copy.deepcopy(SCHEDULE_CONFIG)
