"""API infrastructure stack for Lambda + API Gateway wiring."""

from __future__ import annotations

from pathlib import Path

from aws_cdk import CfnOutput, Duration, Stack
from aws_cdk import aws_apigateway as apigateway
from aws_cdk import aws_lambda as lambda_
from constructs import Construct

from stacks.data_stack import DataStack

_CORS_ALLOW_HEADERS = [
    "Content-Type",
    "Authorization",
    "X-Amz-Date",
    "X-Api-Key",
    "X-Amz-Security-Token",
]


class ApiStack(Stack):
    """Owns API Gateway and the Lambda serving the catalog routes."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        data_stack: DataStack,
        stage_name: str,
        cors_allow_origin: str,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        project_root = Path(__file__).resolve().parents[2]
        lambda_code = lambda_.Code.from_asset(
            str(project_root),
            exclude=[
                ".git",
                ".github",
                "infra",
                "node_modules",
                "cdk.out",
                "__pycache__",
                "tests",
                "scripts",
            ],
        )

        catalog_api_handler = lambda_.Function(
            self,
            "CatalogApiHandler",
            runtime=lambda_.Runtime.PYTHON_3_12,
            code=lambda_code,
            handler="backend.runtime.lambda_handler",
            timeout=Duration.seconds(29),
            memory_size=256,
            environment={
                "CATALOG_DATA_BUCKET": data_stack.catalog_data_bucket.bucket_name,
                "CATALOG_DATA_PREFIX": data_stack.data_prefix,
                "CORS_ALLOW_ORIGIN": cors_allow_origin,
            },
        )
        data_stack.catalog_data_bucket.grant_read(catalog_api_handler)

        allow_origins = (
            apigateway.Cors.ALL_ORIGINS if cors_allow_origin == "*" else [cors_allow_origin]
        )
        self.rest_api = apigateway.RestApi(
            self,
            "CatalogApi",
            rest_api_name="course-catalog-mock-api",
            deploy_options=apigateway.StageOptions(stage_name=stage_name),
            default_cors_preflight_options=apigateway.CorsOptions(
                allow_origins=allow_origins,
                allow_methods=apigateway.Cors.ALL_METHODS,
                allow_headers=_CORS_ALLOW_HEADERS,
            ),
        )
        for response_id, response_type in (
            ("Default4xxCors", apigateway.ResponseType.DEFAULT_4_XX),
            ("Default5xxCors", apigateway.ResponseType.DEFAULT_5_XX),
        ):
            self.rest_api.add_gateway_response(
                response_id,
                type=response_type,
                response_headers={
                    "Access-Control-Allow-Origin": f"'{cors_allow_origin}'",
                    "Access-Control-Allow-Headers": f"'{','.join(_CORS_ALLOW_HEADERS)}'",
                    "Access-Control-Allow-Methods": "'GET,HEAD,PUT,PATCH,POST,DELETE'",
                },
            )

        integration = apigateway.LambdaIntegration(catalog_api_handler)
        api = self.rest_api.root.add_resource("api")
        api.add_method("ANY", integration)
        api.add_proxy(default_integration=integration, any_method=True)

        api_base_url = self.rest_api.url.rstrip("/")
        CfnOutput(
            self,
            "ApiBaseUrl",
            value=api_base_url,
            description="Base URL for smoke tests (BASE_URL)",
        )
        CfnOutput(
            self,
            "HealthCheckUrl",
            value=f"{api_base_url}/api/health",
            description="Catalog API health endpoint",
        )
