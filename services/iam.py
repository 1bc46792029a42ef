import logging
import time

from google.oauth2 import service_account
from googleapiclient import discovery
from googleapiclient.errors import HttpError
from google.auth.exceptions import GoogleAuthError

from services.credentials import parse_service_account
from services.errors import NotConfigured, ServiceError

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/cloud-platform"]
MEMBER_KINDS = {"user", "group", "serviceAccount"}


def members_from_policy(policy: dict) -> list:
    """
    Flattens IAM policy bindings into unique lower-cased emails. Only
    user:, group: and serviceAccount: members carry an email.
    """
    seen = []
    for binding in (policy or {}).get("bindings") or []:
        for member in binding.get("members") or []:
            kind, sep, value = str(member or "").partition(":")
            if not sep or kind not in MEMBER_KINDS:
                continue
            email = value.lower()
            if email not in seen:
                seen.append(email)
    return seen


class ProjectIamClient:
    """Reads live project IAM membership, cached in-process for a short TTL."""

    def __init__(self, service_account_raw, project_id, cache_ttl=60, clock=time.monotonic):
        self._service_account_raw = service_account_raw
        self._project_id = project_id
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cached = None
        self._expires_at = 0.0

    @property
    def resource_name(self) -> str:
        if not self._project_id:
            raise NotConfigured("GCP_PROJECT_ID env var required")
        if self._project_id.startswith("projects/"):
            return self._project_id
        return f"projects/{self._project_id}"

    def fetch_policy(self) -> dict:
        svc = parse_service_account(self._service_account_raw, label="GOOGLE_SERVICE_ACCOUNT")
        resource = self.resource_name
        try:
            creds = service_account.Credentials.from_service_account_info(svc, scopes=SCOPES)
            crm = discovery.build("cloudresourcemanager", "v3", credentials=creds, cache_discovery=False)
            return crm.projects().getIamPolicy(resource=resource, body={}).execute()
        except (HttpError, GoogleAuthError, ValueError) as exc:
            raise ServiceError(f"IAM policy fetch failed: {exc}")

    def get_members(self, force_refresh: bool = False) -> list:
        now = self._clock()
        if not force_refresh and self._cached is not None and self._expires_at > now:
            return list(self._cached)

        members = members_from_policy(self.fetch_policy())
        self._cached = list(members)
        self._expires_at = self._clock() + self._cache_ttl
        logger.debug("fetched %d IAM members for %s", len(members), self._project_id)
        return members
