"""
Library Settings

Environment-driven settings for the job domain services.
"""

import os
from datetime import timedelta
from typing import Optional


class CrmConfig:
    """CRM configuration settings."""

    def __init__(self):
        self.default_company_id = os.getenv("CRM_DEFAULT_COMPANY", "UNKNOWN_COMPANY")
        self.overdue_days = int(os.getenv("CRM_OVERDUE_DAYS", 5))
        self.blob_dir = os.getenv("CRM_BLOB_DIR", "/tmp/fieldcrm-blobs")
        self.gcs_bucket_name: Optional[str] = os.getenv("GCS_BUCKET_NAME") or None

        if self.overdue_days < 0:
            raise ValueError(f"CRM_OVERDUE_DAYS must not be negative, got {self.overdue_days}")

    @property
    def overdue_after(self) -> timedelta:
        """How long after completion an unpaid balance becomes overdue."""
        return timedelta(days=self.overdue_days)
