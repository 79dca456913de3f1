"""
Outbound job webhooks.

JobTrackingClient posts a job to the internal job-tracking portal and
returns its id. VendorPortalClient posts a job notice to the vendor's
portal. Both use a fixed timeout, never retry, and raise IntegrationFailure
on any transport or HTTP error.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional
import requests
from django.conf import settings
from releasehub.core.exceptions import IntegrationFailure
from releasehub.documents.storage import DocumentStorage

logger = logging.getLogger('releasehub.notifications')


def _post_json(service, url, payload, headers, timeout):
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.exceptions.Timeout:
        raise IntegrationFailure(service, f'timed out after {timeout}s')
    except requests.exceptions.RequestException as e:
        raise IntegrationFailure(service, f'request failed: {str(e)}')
    except ValueError:
        raise IntegrationFailure(service, 'response was not JSON')


class JobTrackingClient:
    service = 'job-tracking'

    def __init__(self, base_url='', secret='', company_name='', timeout=10):
        self.base_url = base_url.rstrip('/')
        self.secret = secret
        self.company_name = company_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            base_url=settings.JOB_TRACKING_URL,
            secret=settings.JOB_TRACKING_SECRET,
            company_name=settings.JOB_TRACKING_COMPANY_NAME,
            timeout=settings.INTEGRATION_TIMEOUT,
        )

    @property
    def is_configured(self):
        return bool(self.base_url and self.secret)

    def create_job(self, payload):
        """POST the job and return the portal's job id."""
        body = dict(payload, companyName=payload.get('companyName') or self.company_name)
        data = _post_json(
            self.service,
            f"{self.base_url}/api/webhooks/jobs",
            body,
            {'Content-Type': 'application/json', 'X-Webhook-Secret': self.secret},
            self.timeout,
        )
        job_id = data.get('jobId') if isinstance(data, dict) else None
        if not job_id:
            raise IntegrationFailure(self.service, 'response did not include a jobId')
        logger.info(f"Job {payload.get('jobNo')} created in job tracking as {job_id}")
        return str(job_id)


class VendorPortalClient:
    service = 'vendor-portal'

    def __init__(self, base_url='', customer_name='', timeout=10):
        self.base_url = base_url.rstrip('/')
        self.customer_name = customer_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls):
        return cls(
            base_url=settings.VENDOR_PORTAL_URL,
            customer_name=settings.VENDOR_PORTAL_CUSTOMER_NAME,
            timeout=settings.INTEGRATION_TIMEOUT,
        )

    @property
    def is_configured(self):
        return bool(self.base_url)

    def create_job(self, title, email_body):
        data = _post_json(
            self.service,
            f"{self.base_url}/api/jobs",
            {'title': title, 'customerName': self.customer_name, 'emailBody': email_body},
            {'Content-Type': 'application/json'},
            self.timeout,
        )
        job_id = data.get('id') if isinstance(data, dict) else None
        logger.info(f"Vendor portal job created for '{title}': {job_id}")
        return job_id

    def create_job_detached(self, title, email_body):
        """
        Start create_job on a daemon thread and return the thread.

        The caller never observes the outcome; the thread logs its own
        success or failure.
        """
        def run():
            try:
                self.create_job(title, email_body)
            except IntegrationFailure as e:
                logger.error(f"Vendor portal notification for '{title}' failed: {e.message}")
            except Exception as e:
                logger.error(f"Vendor portal notification for '{title}' failed unexpectedly: {e}", exc_info=True)

        thread = threading.Thread(target=run, daemon=True, name=f'vendor-portal-{title}')
        thread.start()
        return thread


@dataclass
class Integrations:
    """Third-party clients the release workflow talks to"""
    storage: object
    job_tracking: JobTrackingClient
    vendor_portal: VendorPortalClient
    vendor_recipients: Optional[dict] = None

    @classmethod
    def from_settings(cls):
        return cls(
            storage=DocumentStorage.from_settings(),
            job_tracking=JobTrackingClient.from_settings(),
            vendor_portal=VendorPortalClient.from_settings(),
            vendor_recipients=dict(settings.VENDOR_NOTIFY_EMAILS),
        )

    def recipients_for_vendor(self, vendor_name):
        return (self.vendor_recipients or {}).get(vendor_name, [])
