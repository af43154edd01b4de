import os

from aws_cdk import (
    Stack,
    CfnOutput,
    Duration,
    aws_apigateway as apigateway,
    aws_iam as iam,
    aws_lambda as lambda_,
)
from constructs import Construct

LAMBDA_CODE_DIR = os.path.join(os.path.dirname(__file__), "..", "lambda")

# Context keys (cdk.json or `cdk deploy -c key=value`) mapped to the function environment
CONTEXT_ENVIRONMENT = {
    "github_username_or_org": "GITHUB_USERNAME_OR_ORG",
    "github_repos_endpoint": "GITHUB_REPOS_ENDPOINT",
    "lab_files_org": "LAB_FILES_ORG",
    "lab_files_base_path": "LAB_FILES_BASE_PATH",
}


class LabFilesStack(Stack):

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Part 1 : The lambda function serving both routes

        # Powertools Lambda Layer
        # Check all Powertools layers versions here: https://docs.powertools.aws.dev/lambda/python/latest/#lambda-layer
        powertools_layer = lambda_.LayerVersion.from_layer_version_arn(
            self,
            id="lambda-powertools",
            layer_version_arn=f"arn:aws:lambda:{self.region}:017000801446:layer:AWSLambdaPowertoolsPythonV3-python312-x86_64:7"
        )

        environment = {
            "POWERTOOLS_SERVICE_NAME": "lab-files",
            "POWERTOOLS_LOG_LEVEL": "INFO",
        }
        for context_key, variable in CONTEXT_ENVIRONMENT.items():
            value = self.node.try_get_context(context_key)
            if value:
                environment[variable] = value

        token_parameter_name = self.node.try_get_context("github_token_parameter")
        if token_parameter_name:
            environment["GITHUB_TOKEN_PARAMETER"] = token_parameter_name

        lab_files_function = lambda_.Function(
            self,
            "LabFilesFunction",
            runtime=lambda_.Runtime.PYTHON_3_12,
            function_name="LabFilesFunction",
            description="Lists GitHub repositories and the lab files of a repository",
            layers=[
                powertools_layer,
            ],
            code=lambda_.Code.from_asset(LAMBDA_CODE_DIR),
            handler="lab_files_lambda.lambda_handler",
            environment=environment,
            tracing=lambda_.Tracing.ACTIVE,
            # One top level listing plus one call per lab directory, each bounded by GITHUB_TIMEOUT
            timeout=Duration.seconds(30),
            memory_size=256,
        )

        # Adding the permission to read the GitHub token from the parameter store
        if token_parameter_name:
            lab_files_function.add_to_role_policy(iam.PolicyStatement(
                sid="ReadGitHubToken",
                effect=iam.Effect.ALLOW,
                actions=[
                    "ssm:GetParameter",
                ],
                resources=[
                    f"arn:aws:ssm:{self.region}:{self.account}:parameter/{token_parameter_name.lstrip('/')}"
                ]
            ))

        # Part 2 : The REST API in front of the function

        api = apigateway.LambdaRestApi(
            self,
            "LabFilesApi",
            rest_api_name="lab-files-api",
            handler=lab_files_function,
            proxy=False,
        )

        repos = api.root.add_resource("repos")
        repos.add_method("GET")

        lab_files = api.root.add_resource("repositories").add_resource("{repoName}").add_resource("labfiles")
        lab_files.add_method("GET", api_key_required=True)

        # The labfiles route needs an API key, /repos stays anonymous
        api_key = api.add_api_key("LabFilesApiKey")
        usage_plan = api.add_usage_plan(
            "LabFilesUsagePlan",
            name="lab-files",
            api_stages=[apigateway.UsagePlanPerApiStage(api=api, stage=api.deployment_stage)],
        )
        usage_plan.add_api_key(api_key)

        # Output the URL of the API
        CfnOutput(self, "Lab Files API URL", value=api.url)

        # Output the id of the API key, the value is read with `aws apigateway get-api-key --include-value`
        CfnOutput(self, "Lab Files API Key Id", value=api_key.key_id)
