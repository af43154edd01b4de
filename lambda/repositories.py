from aws_lambda_powertools import Logger

from errors import ClientInputError
from github_client import GitHubClient, GitHubResponse
from settings import Settings

logger = Logger(child=True)


def list_repositories(client: GitHubClient, settings: Settings) -> GitHubResponse:
    """Relay the repository listing of the configured user or organization.

    The status code and body are returned as GitHub sent them.
    """
    identifier = settings.github_username_or_org
    if not identifier or not identifier.strip():
        raise ClientInputError("Please configure the GITHUB_USERNAME_OR_ORG setting.")

    response = client.list_repositories(identifier, settings.repos_endpoint)
    if not response.ok:
        logger.warning(
            f"GitHub returned {response.status_code} listing repositories",
            extra={"identifier": identifier, "endpoint": settings.repos_endpoint},
        )
    return response
