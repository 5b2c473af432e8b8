"""Fixed placeholder workflows served when no catalog data is reachable."""

from automation_matching.catalog.normalize import CatalogArtifact, normalize_workflow

PLACEHOLDER_SOURCE = "placeholder"

_PLACEHOLDER_RECORDS = [
    {
        "id": "placeholder-slack-notification",
        "filename": "slack_webhook_notification.json",
        "name": "Slack Webhook Notification",
        "description": "Send a Slack message whenever a webhook receives new data",
        "integrations": ["Webhook", "Slack"],
        "triggerType": "Webhook",
        "complexity": "Low",
        "category": "messaging",
        "nodeCount": 3,
    },
    {
        "id": "placeholder-google-sheets-sync",
        "filename": "scheduled_google_sheets_sync.json",
        "name": "Scheduled Google Sheets Sync",
        "description": "Synchronize rows between Google Sheets and a database on a schedule",
        "integrations": ["Google Sheets", "Postgres", "Schedule Trigger"],
        "triggerType": "Scheduled",
        "complexity": "Medium",
        "category": "database",
        "nodeCount": 6,
    },
    {
        "id": "placeholder-datev-invoices",
        "filename": "datev_invoice_processing.json",
        "name": "DATEV Rechnungsverarbeitung",
        "description": "Rechnungen per E-Mail empfangen, per OCR auslesen, kontieren und in DATEV verbuchen",
        "integrations": ["Gmail", "OCR", "DATEV"],
        "triggerType": "Complex",
        "complexity": "Medium",
        "category": "finance",
        "nodeCount": 8,
    },
    {
        "id": "placeholder-email-marketing",
        "filename": "email_marketing_campaign.json",
        "name": "Email Marketing Campaign",
        "description": "Segment contacts and send personalized newsletter campaigns with tracking",
        "integrations": ["Mailchimp", "Google Sheets", "HTTP Request"],
        "triggerType": "Scheduled",
        "complexity": "Medium",
        "category": "social_media",
        "nodeCount": 7,
    },
    {
        "id": "placeholder-crm-sync",
        "filename": "crm_contact_sync.json",
        "name": "CRM Contact Sync",
        "description": "Keep contacts in HubSpot and Salesforce in sync via webhook events",
        "integrations": ["HubSpot", "Salesforce", "Webhook"],
        "triggerType": "Webhook",
        "complexity": "High",
        "category": "social_media",
        "nodeCount": 14,
    },
    {
        "id": "placeholder-ai-content",
        "filename": "ai_content_generation.json",
        "name": "AI Content Generation",
        "description": "Generate blog posts and social snippets with OpenAI and publish them for review",
        "integrations": ["OpenAI", "Google Docs", "Slack"],
        "triggerType": "Manual",
        "complexity": "Medium",
        "category": "ai_ml",
        "nodeCount": 5,
    },
    {
        "id": "placeholder-ai-support-triage",
        "filename": "ai_support_ticket_triage.json",
        "name": "AI Support Ticket Triage",
        "description": "Classify incoming support emails with an LLM and route them to the right team",
        "integrations": ["OpenAI", "Gmail", "Zendesk"],
        "triggerType": "Complex",
        "complexity": "High",
        "category": "ai_ml",
        "nodeCount": 11,
    },
]


def placeholder_artifacts() -> list[CatalogArtifact]:
    """Normalized placeholder set, tagged with the placeholder source."""
    return [
        normalize_workflow({**record, "source": PLACEHOLDER_SOURCE, "license": "MIT"}, PLACEHOLDER_SOURCE)
        for record in _PLACEHOLDER_RECORDS
    ]
