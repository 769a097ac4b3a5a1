from __future__ import annotations

import logging

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

def make_session(profile: str | None, region: str | None):
    cfg = Config(
        retries={"max_attempts": 10, "mode": "standard"},
        connect_timeout=5,
        read_timeout=900,
        region_name=region,
    )
    if profile:
        return boto3.Session(profile_name=profile, region_name=region), cfg
    return boto3.Session(region_name=region), cfg

def lambda_client(session_and_cfg):
    session, cfg = session_and_cfg
    return session.client("lambda", config=cfg)

def get_function_policy(client, function_name: str, qualifier: str | None = None):
    """Returns the function's resource policy JSON, or None when it has none."""
    kwargs = {"FunctionName": function_name}
    if qualifier:
        kwargs["Qualifier"] = qualifier
    try:
        return client.get_policy(**kwargs)["Policy"]
    except ClientError as e:
        code = e.response["Error"]["Code"]
        if code == "ResourceNotFoundException":
            logger.info(f"no resource policy for {function_name}")
            return None
        raise
