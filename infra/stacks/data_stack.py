"""Data infrastructure stack for the catalog mock-data bucket."""

from __future__ import annotations

from pathlib import Path

from aws_cdk import CfnOutput, RemovalPolicy, Stack
from aws_cdk import aws_s3 as s3
from aws_cdk import aws_s3_deployment as s3_deployment
from constructs import Construct


class DataStack(Stack):
    """Owns the S3 bucket that holds the catalog JSON files."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        data_asset_path: str,
        data_prefix: str,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.data_prefix = data_prefix.strip("/")
        self.catalog_data_bucket = s3.Bucket(
            self,
            "CatalogDataBucket",
            encryption=s3.BucketEncryption.S3_MANAGED,
            block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
            enforce_ssl=True,
            auto_delete_objects=True,
            removal_policy=RemovalPolicy.DESTROY,
        )

        s3_deployment.BucketDeployment(
            self,
            "DeployCatalogData",
            destination_bucket=self.catalog_data_bucket,
            destination_key_prefix=self.data_prefix or None,
            sources=[s3_deployment.Source.asset(str(Path(data_asset_path)))],
            prune=True,
        )

        CfnOutput(
            self,
            "CatalogDataBucketName",
            value=self.catalog_data_bucket.bucket_name,
            description="Catalog mock-data bucket name",
        )
