"""Registry credential sources.

Each source wraps one cloud registry provider and turns its short-lived
authorization token into a RegistryCredential. Sources never retry; a
failed fetch skips the provider for the current cycle.
"""

import base64
from typing import Protocol

import boto3
import google.auth
import google.auth.transport.requests
from botocore.exceptions import BotoCoreError, ClientError
from google.auth.exceptions import GoogleAuthError
from icecream import ic

from registry_creds.exceptions import CredentialFetchError
from registry_creds.models import RegistryCredential

# OAuth2 scope accepted by the GCR token exchange
GCR_SCOPE = "https://www.googleapis.com/auth/cloud-platform"

# Docker login user for OAuth2 access tokens on Google registries
GCR_TOKEN_USER = "oauth2accesstoken"

_ASSUME_ROLE_SESSION = "registry-creds"


class CredentialSource(Protocol):
    """A provider that hands out registry credentials."""

    name: str

    def fetch(self) -> RegistryCredential:
        """Fetch a fresh credential; raise CredentialFetchError on failure."""
        ...


class ElasticRegistrySource:
    """Credential source for AWS Elastic Container Registry.

    Attributes:
        region: AWS region of the registry.
        account_id: Registry (account) id, or None for the caller's default registry.
        assume_role: Optional IAM role ARN assumed before calling ECR.

    """

    name = "ECR"

    def __init__(self, *, region: str, account_id: str | None = None, assume_role: str | None = None) -> None:
        self.region = region
        self.account_id = account_id
        self.assume_role = assume_role

    def _ecr_client(self):
        """Build the ECR client, assuming the configured role first if any."""
        if not self.assume_role:
            return boto3.client("ecr", region_name=self.region)

        sts = boto3.client("sts", region_name=self.region)
        credentials = sts.assume_role(RoleArn=self.assume_role, RoleSessionName=_ASSUME_ROLE_SESSION)["Credentials"]
        return boto3.client(
            "ecr",
            region_name=self.region,
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
        )

    def fetch(self) -> RegistryCredential:
        """Fetch an ECR authorization token.

        The token returned by ECR is already base64 of ``AWS:<password>``
        and is passed through unchanged.

        Returns:
            The token and the proxy endpoint of the first authorization entry.

        Raises:
            CredentialFetchError: If the call fails or returns no authorization data.

        """
        kwargs = {"registryIds": [self.account_id]} if self.account_id else {}
        try:
            response = self._ecr_client().get_authorization_token(**kwargs)
        except (BotoCoreError, ClientError) as e:
            raise CredentialFetchError(self.name, str(e)) from e

        authorization_data = response.get("authorizationData") or []
        if not authorization_data:
            raise CredentialFetchError(self.name, "response contains no authorization data")

        entry = authorization_data[0]
        ic(entry.get("proxyEndpoint"), entry.get("expiresAt"))
        return RegistryCredential(token=entry["authorizationToken"], endpoint=entry["proxyEndpoint"])

    def __repr__(self) -> str:
        return f"ElasticRegistrySource(region={self.region!r}, account_id={self.account_id!r})"


class CloudRegistrySource:
    """Credential source for Google Container Registry.

    Uses the application default credential chain (workload identity,
    metadata server, ``GOOGLE_APPLICATION_CREDENTIALS``...).

    Attributes:
        registry_url: The registry endpoint the token is written for.

    """

    name = "GCR"

    def __init__(self, *, registry_url: str) -> None:
        self.registry_url = registry_url

    def fetch(self) -> RegistryCredential:
        try:
            credentials, project = google.auth.default(scopes=[GCR_SCOPE])
            credentials.refresh(google.auth.transport.requests.Request())
        except GoogleAuthError as e:
            raise CredentialFetchError(self.name, str(e)) from e
        ic(project)

        if not credentials.token:
            raise CredentialFetchError(self.name, "credential chain returned an empty access token")

        auth = base64.b64encode(f"{GCR_TOKEN_USER}:{credentials.token}".encode()).decode("ascii")
        return RegistryCredential(token=auth, endpoint=self.registry_url)

    def __repr__(self) -> str:
        return f"CloudRegistrySource(registry_url={self.registry_url!r})"
