#!/usr/bin/env python3
"""CDK app entrypoint for the course catalog mock API."""

from __future__ import annotations

import os
from pathlib import Path

import aws_cdk as cdk

from stacks.api_stack import ApiStack
from stacks.data_stack import DataStack

app = cdk.App()

env = cdk.Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION"),
)

stage_name = app.node.try_get_context("stageName") or "dev"
project_root = Path(__file__).resolve().parents[1]
data_asset_path = app.node.try_get_context("catalogDataPath") or str(project_root / "backend" / "fixtures")
data_prefix = app.node.try_get_context("catalogDataPrefix") or "mock-data"
cors_allow_origin = os.getenv("CORS_ALLOW_ORIGIN", "").strip() or "*"

data_stack = DataStack(
    app,
    "CatalogDataStack",
    env=env,
    data_asset_path=data_asset_path,
    data_prefix=data_prefix,
)

api_stack = ApiStack(
    app,
    "CatalogApiStack",
    env=env,
    data_stack=data_stack,
    stage_name=stage_name,
    cors_allow_origin=cors_allow_origin,
)
api_stack.add_dependency(data_stack)

app.synth()
