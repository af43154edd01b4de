import os
from functools import lru_cache
from typing import Literal, Optional

from aws_lambda_powertools import Logger
from aws_lambda_powertools.utilities import parameters
from pydantic import BaseModel, ConfigDict, Field

logger = Logger(child=True)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    github_token: Optional[str] = None
    github_username_or_org: Optional[str] = None
    repos_endpoint: Literal["users", "orgs"] = "users"
    lab_files_org: str = "IT-M365-Training"
    lab_files_base_path: str = "Instructions/Labs"
    github_api_url: str = "https://api.github.com"
    github_user_agent: str = "LabFilesFunction"
    github_timeout: float = Field(default=20, gt=0)
    max_workers: int = Field(default=8, ge=1)

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {
            "github_token": _read_token(environ),
            "github_username_or_org": environ.get("GITHUB_USERNAME_OR_ORG") or None,
        }
        # Unset variables fall back to the model defaults
        optional = {
            "repos_endpoint": "GITHUB_REPOS_ENDPOINT",
            "lab_files_org": "LAB_FILES_ORG",
            "lab_files_base_path": "LAB_FILES_BASE_PATH",
            "github_api_url": "GITHUB_API_URL",
            "github_user_agent": "GITHUB_USER_AGENT",
            "github_timeout": "GITHUB_TIMEOUT",
            "max_workers": "LAB_FILES_MAX_WORKERS",
        }
        for field, variable in optional.items():
            if environ.get(variable):
                values[field] = environ[variable]
        return cls(**values)


def _read_token(environ) -> Optional[str]:
    token = environ.get("GITHUB_TOKEN")
    if token:
        return token
    parameter_name = environ.get("GITHUB_TOKEN_PARAMETER")
    if parameter_name:
        logger.info("Reading GitHub token from parameter store", extra={"parameter": parameter_name})
        return parameters.get_parameter(parameter_name, decrypt=True)
    logger.warning("No GitHub token configured, calls are unauthenticated")
    return None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings for this execution environment, loaded on first use."""
    return Settings.from_env()
