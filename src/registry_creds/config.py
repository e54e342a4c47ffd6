"""Controller settings.

Settings are collected from command-line options (with environment
variable fallbacks, see ``registry_creds.cli``) into a frozen dataclass
that builds the ordered provider list.
"""

from dataclasses import dataclass, field

from registry_creds.models import Provider, SecretKind
from registry_creds.providers import CloudRegistrySource, ElasticRegistrySource

DEFAULT_AWS_REGION = "us-east-1"
DEFAULT_AWS_SECRET_NAME = "awsecr-cred"
DEFAULT_GCR_URL = "https://gcr.io"
DEFAULT_GCR_SECRET_NAME = "gcr-secret"
DEFAULT_REFRESH_MINS = 60
DEFAULT_EXCLUDED_NAMESPACES: tuple[str, ...] = ("kube-system",)


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration of the controller.

    An empty ``gcr_url`` disables GCR and an empty ``aws_region``
    disables ECR.
    """

    aws_region: str = DEFAULT_AWS_REGION
    aws_account: str | None = None
    aws_assume_role: str | None = None
    aws_secret_name: str = DEFAULT_AWS_SECRET_NAME
    gcr_url: str = DEFAULT_GCR_URL
    gcr_secret_name: str = DEFAULT_GCR_SECRET_NAME
    excluded_namespaces: tuple[str, ...] = field(default=DEFAULT_EXCLUDED_NAMESPACES)
    refresh_mins: int = DEFAULT_REFRESH_MINS

    def build_providers(self) -> list[Provider]:
        """Return the registered providers in reference order (GCR, then ECR).

        Disabled providers are kept in the list without a source so the
        order stays fixed whatever is configured.
        """
        gcr_source = CloudRegistrySource(registry_url=self.gcr_url) if self.gcr_url else None
        ecr_source = (
            ElasticRegistrySource(
                region=self.aws_region,
                account_id=self.aws_account or None,
                assume_role=self.aws_assume_role or None,
            )
            if self.aws_region
            else None
        )

        return [
            Provider(
                name=CloudRegistrySource.name,
                secret_name=self.gcr_secret_name,
                kind=SecretKind.DOCKER_CFG,
                source=gcr_source,
            ),
            Provider(
                name=ElasticRegistrySource.name,
                secret_name=self.aws_secret_name,
                kind=SecretKind.DOCKER_CONFIG_JSON,
                source=ecr_source,
            ),
        ]
