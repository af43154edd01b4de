import json

from aws_lambda_powertools import Logger, Tracer
from aws_lambda_powertools.event_handler import APIGatewayRestResolver, Response, content_types
from aws_lambda_powertools.event_handler.exceptions import NotFoundError
from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.utilities.typing import LambdaContext

from errors import ClientInputError, GitHubConnectionError, GitHubDecodeError, LabFilesError, UpstreamStatusError
from github_client import GitHubClient
from lab_tree import build_lab_tree
from models import dump_lab_items
from repositories import list_repositories
from settings import get_settings

tracer = Tracer()
logger = Logger()
app = APIGatewayRestResolver()


@app.get("/repos", description="Lists the repositories of the configured GitHub user or organization")
@tracer.capture_method
def get_repositories() -> Response:
    logger.info("Processing a request to get GitHub repositories")
    settings = get_settings()
    try:
        response = list_repositories(GitHubClient.from_settings(settings), settings)
    except GitHubConnectionError as e:
        logger.error(f"HTTP request to GitHub failed: {e.reason}", extra={"url": e.url})
        return _message(503, "Failed to connect to GitHub.")
    return Response(
        status_code=response.status_code,
        content_type=content_types.APPLICATION_JSON,
        body=response.body,
    )


@app.get("/repositories/<repo_name>/labfiles", description="Lists the lab markdown files of a repository")
@tracer.capture_method
def get_lab_files(repo_name: str) -> Response:
    logger.info(f"Processing a request for repository: {repo_name} lab files")
    settings = get_settings()
    tree = build_lab_tree(
        GitHubClient.from_settings(settings),
        settings.lab_files_org,
        repo_name,
        base_path=settings.lab_files_base_path,
        max_workers=settings.max_workers,
    )
    return Response(
        status_code=200,
        content_type=content_types.APPLICATION_JSON,
        body=dump_lab_items(tree),
    )


@app.exception_handler(ClientInputError)
def handle_client_input_error(ex: ClientInputError):
    logger.warning(str(ex))
    return _message(400, str(ex))


@app.exception_handler(UpstreamStatusError)
def handle_upstream_status(ex: UpstreamStatusError):
    # GitHub's status is passed through as is, without its body
    return Response(status_code=ex.status_code, content_type=content_types.TEXT_PLAIN, body="")


@app.exception_handler(GitHubConnectionError)
def handle_connection_error(ex: GitHubConnectionError):
    logger.error(f"Error processing GitHub API request: {ex}", extra={"url": ex.url})
    return _message(500, "Error processing GitHub API request.")


@app.exception_handler(GitHubDecodeError)
def handle_decode_error(ex: GitHubDecodeError):
    logger.error(f"Failed to deserialize GitHub response: {ex}")
    return _message(500, "Failed to process GitHub response.")


@app.exception_handler(LabFilesError)
def handle_lab_files_error(ex: LabFilesError):
    logger.error(f"Error processing GitHub API request: {ex}")
    return _message(500, "Internal server error.")


@app.exception_handler(Exception)
def handle_unexpected_error(ex: Exception):
    logger.exception("Unexpected error processing the request")
    return _message(500, "Internal server error.")


# unmatched routes stay 404 rather than reaching the Exception handler
@app.not_found
def handle_not_found(ex: NotFoundError):
    return _message(404, "Not found.")


def _message(status_code: int, message: str) -> Response:
    return Response(
        status_code=status_code,
        content_type=content_types.APPLICATION_JSON,
        body=json.dumps({"message": message}),
    )


@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
@tracer.capture_lambda_handler
def lambda_handler(event: dict, context: LambdaContext) -> dict:
    return app.resolve(event, context)
